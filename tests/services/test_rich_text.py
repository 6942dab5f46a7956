# tests/services/test_rich_text.py
"""Tests for rich-text helpers."""

from __future__ import annotations

import json

from drystore_hub.services.rich_text import extract_text, is_rich_content, parse_document, to_document


def _doc(*children: dict) -> dict:
    return {"type": "doc", "content": [{"type": "paragraph", "content": list(children)}]}


def test_extract_text_renders_mentions() -> None:
    doc = _doc(
        {"type": "text", "text": "Oi"},
        {"type": "mention", "attrs": {"id": "u1", "label": "Ana"}},
    )
    assert extract_text(doc) == "Oi @Ana"
    assert extract_text(json.dumps(doc)) == "Oi @Ana"


def test_plain_text_passthrough() -> None:
    assert parse_document("  bom dia ") is None
    assert extract_text("  bom dia ") == "bom dia"
    assert extract_text("{not json") == ""


def test_is_rich_content() -> None:
    assert is_rich_content(json.dumps(_doc()))
    assert is_rich_content("<p>oi</p>")
    assert not is_rich_content("texto simples")


def test_to_document_wraps_plain_text() -> None:
    assert extract_text(to_document("Loja fechada")) == "Loja fechada"
    assert to_document(None) == {"type": "doc", "content": []}
    assert to_document(_doc()) == _doc()
