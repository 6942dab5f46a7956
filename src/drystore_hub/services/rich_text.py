"""Helpers for rich-text documents produced by the web editor.

Documents are ProseMirror-style JSON trees: every node has a ``type`` and
optionally ``text``, ``attrs`` and a ``content`` list of child nodes. Message
bodies may hold either such a tree serialized as a string or plain text.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

MENTION_NODE = "mention"
TEXT_NODE = "text"


def parse_document(content: Any) -> dict[str, Any] | None:
    """Return the document tree for ``content`` or None for plain text."""
    if isinstance(content, dict):
        return content if "type" in content else None
    if not isinstance(content, str):
        return None
    stripped = content.strip()
    if not stripped.startswith("{"):
        return None
    try:
        node = json.loads(stripped)
    except ValueError:
        return None
    if isinstance(node, dict) and "type" in node:
        return node
    return None


def iter_nodes(node: dict[str, Any] | None) -> Iterator[dict[str, Any]]:
    """Yield every node of the tree depth first, in document order."""
    if not isinstance(node, dict):
        return
    yield node
    children = node.get("content")
    if isinstance(children, list):
        for child in children:
            yield from iter_nodes(child)


def mention_label(node: dict[str, Any]) -> str:
    """Return the text an inline mention renders as."""
    attrs = node.get("attrs") or {}
    return f"@{attrs.get('label') or attrs.get('id') or ''}"


def extract_text(content: Any) -> str:
    """Flatten ``content`` into plain text.

    Text nodes are joined with single spaces and mention nodes render as
    ``@label``. Plain strings are returned stripped; unparseable JSON that
    looks like a document yields an empty string.
    """
    doc = parse_document(content)
    if doc is None:
        if isinstance(content, str):
            if content.strip().startswith("{"):
                return ""
            return content.strip()
        return ""

    parts: list[str] = []
    for node in iter_nodes(doc):
        node_type = node.get("type")
        if node_type == TEXT_NODE and node.get("text"):
            parts.append(str(node["text"]))
        elif node_type == MENTION_NODE:
            parts.append(mention_label(node))
    return " ".join(part.strip() for part in parts if part.strip())


def is_rich_content(content: Any) -> bool:
    """Return True for serialized documents and HTML-looking strings."""
    if parse_document(content) is not None:
        return True
    return isinstance(content, str) and "<" in content


def serialize_content(content: Any) -> str:
    """Return the string stored in ``messages.content``."""
    if isinstance(content, dict):
        return json.dumps(content, ensure_ascii=False, separators=(",", ":"))
    return str(content or "").strip()


def to_document(content: Any) -> dict[str, Any]:
    """Return ``content`` as a document tree, wrapping plain text in a paragraph."""
    doc = parse_document(content)
    if doc is not None:
        return doc
    text = str(content or "").strip() if not isinstance(content, dict) else ""
    if not text:
        return {"type": "doc", "content": []}
    return {
        "type": "doc",
        "content": [{"type": "paragraph", "content": [{"type": TEXT_NODE, "text": text}]}],
    }
