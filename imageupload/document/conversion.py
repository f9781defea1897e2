"""Conversion between HTML fragments and document nodes.

Pasted HTML is flattened into root-level blocks: block elements become
paragraphs, ``<img>`` elements become image nodes in document order, and
loose inline content is gathered into a paragraph.
"""

from __future__ import annotations

import html as html_module
import re
from typing import Any

from selectolax.lexbor import LexborHTMLParser

from imageupload.document.document import Document
from imageupload.document.model import Node

_STRIP_TAGS = frozenset(("script", "style", "noscript", "template", "head"))

_BLOCK_TAGS = frozenset(
    (
        "p",
        "div",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "li",
        "blockquote",
        "pre",
        "figure",
        "section",
        "article",
    )
)

_IMAGE_ATTRIBUTES = ("src", "alt")

_WHITESPACE_RUN = re.compile(r"[\s\u00a0]+")


def html_to_nodes(html: str) -> list[Node]:
    """Parse an HTML fragment into root-level nodes."""
    if not html or not html.strip():
        return []

    tree = LexborHTMLParser(html)
    root = tree.body if tree.body else tree.root
    if root is None:
        return []

    nodes: list[Node] = []
    inline: list[str] = []

    def _flush() -> None:
        text = _WHITESPACE_RUN.sub(" ", "".join(inline)).strip()
        inline.clear()
        if text:
            nodes.append(Node("paragraph", text=text))

    def _walk(node: Any) -> None:
        tag = node.tag
        if tag == "-text":
            inline.append(node.text_content or "")
            return
        if tag in _STRIP_TAGS:
            return
        if tag == "img":
            _flush()
            attributes = {
                key: node.attributes[key]
                for key in _IMAGE_ATTRIBUTES
                if node.attributes.get(key) is not None
            }
            nodes.append(Node("image", attributes=attributes))
            return
        if tag == "br":
            inline.append(" ")
            return
        is_block = tag in _BLOCK_TAGS
        if is_block:
            _flush()
        child = node.child
        while child is not None:
            _walk(child)
            child = child.next
        if is_block:
            _flush()

    child = root.child
    while child is not None:
        _walk(child)
        child = child.next
    _flush()
    return nodes


def text_to_nodes(text: str) -> list[Node]:
    """Plain text: one paragraph per non-empty line."""
    return [Node("paragraph", text=line.strip()) for line in text.splitlines() if line.strip()]


def stringify_node(node: Node) -> str:
    attributes = "".join(
        f' {key}="{html_module.escape(str(value), quote=True)}"'
        for key, value in sorted(node.attributes.items())
    )
    return f"<{node.name}{attributes}>{html_module.escape(node.text, quote=False)}</{node.name}>"


def stringify(document: Document | list[Node]) -> str:
    """Serialize nodes as ``<name attr="...">text</name>`` with sorted attributes."""
    return "".join(stringify_node(node) for node in document)
