"""Builders for hand-made rendered snapshots."""

from html2pptx.dom import ComputedStyle, ElementNode, Rect, RenderedDocument, TextNode

SLIDE_W = 1600
SLIDE_H = 900


def el(tag, *children, rect=(0, 0, 0, 0), style=None, **attrs):
    """Element node; string children become text nodes.

    ``class_`` is accepted for the ``class`` attribute.
    """
    if "class_" in attrs:
        attrs["class"] = attrs.pop("class_")
    return ElementNode(
        tag=tag,
        attrs=attrs,
        style=ComputedStyle(style or {}),
        rect=Rect(*rect),
        children=[TextNode(c) if isinstance(c, str) else c for c in children],
    )


def doc(*children, width=SLIDE_W, height=SLIDE_H, scroll=None, style=None):
    body_style = {"background-color": "rgb(255, 255, 255)"}
    body_style.update(style or {})
    body = el("body", *children, rect=(0, 0, width, height), style=body_style)
    scroll_w, scroll_h = scroll or (width, height)
    return RenderedDocument(
        body=body, width=width, height=height, scroll_width=scroll_w, scroll_height=scroll_h
    )
