import pytest

from html2pptx import cli


def test_file_and_folder_are_exclusive():
    parser = cli.build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["--file", "a.html", "--folder", "slides"])


def test_default_output():
    args = cli.build_parser().parse_args(["--folder", "slides"])
    assert args.output == "output.pptx"
    assert not args.verbose


def test_missing_input_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--file", str(tmp_path / "nope.html")])
    assert excinfo.value.code == 1
    assert "Input path not found" in capsys.readouterr().err


def test_folder_run_exit_code(tmp_path, monkeypatch):
    calls = []

    async def fake_convert_folder(folder, output, settings):
        calls.append((folder, output))

        class Results:
            success = 0

        return Results()

    monkeypatch.setattr(cli, "convert_folder", fake_convert_folder)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--folder", str(tmp_path), "--output", str(tmp_path / "deck.pptx")])

    assert excinfo.value.code == 1
    assert calls == [(tmp_path, tmp_path / "deck.pptx")]
