"""Mention suggestion and extraction.

The composer fetches the channel member list once, filters it locally while
the user types after ``@`` and inserts an atomic inline ``mention`` node for
the chosen member. When the message is sent the content is walked again and
the mention list stored on the message is re-derived from those nodes (or,
for plain text, from ``@Name`` tokens matching a member).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from drystore_hub.core.settings import settings

from .rich_text import MENTION_NODE, iter_nodes, parse_document

FALLBACK_LABEL = "User"


@dataclass(frozen=True)
class MentionCandidate:
    """Channel member that can be mentioned."""

    user_id: str
    display_name: str | None = None
    avatar_url: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or FALLBACK_LABEL


class MentionSuggester:
    """Synchronous filter over a previously fetched member list."""

    def __init__(self, members: Iterable[MentionCandidate], limit: int | None = None) -> None:
        self._members = list(members)
        self._limit = limit if limit is not None else settings.mention_suggestion_limit

    @property
    def members(self) -> list[MentionCandidate]:
        return list(self._members)

    def search(self, query: str) -> list[MentionCandidate]:
        """Return members whose name or id contains ``query`` (case-insensitive)."""
        if not query:
            return list(self._members)
        needle = query.lower()
        return [
            member
            for member in self._members
            if needle in (member.display_name or "").lower() or needle in member.user_id.lower()
        ]

    def items(self, query: str) -> list[MentionCandidate]:
        """Return the suggestion popup entries for ``query``."""
        return self.search(query)[: self._limit]


def build_mention_node(member: MentionCandidate) -> dict[str, Any]:
    """Return the inline atom inserted when a suggestion is picked."""
    return {"type": MENTION_NODE, "attrs": {"id": member.user_id, "label": member.label}}


def _add(found: list[dict[str, Any]], seen: set[str], user_id: str, display_name: str) -> None:
    if user_id in seen:
        return
    seen.add(user_id)
    found.append({"user_id": user_id, "display_name": display_name})


def extract_mentions(content: Any) -> list[dict[str, Any]]:
    """Return ``[{user_id, display_name}]`` for every mention node, de-duplicated."""
    found: list[dict[str, Any]] = []
    seen: set[str] = set()
    for node in iter_nodes(parse_document(content)):
        if node.get("type") != MENTION_NODE:
            continue
        attrs = node.get("attrs") or {}
        user_id = attrs.get("id")
        if not user_id:
            continue
        _add(found, seen, str(user_id), str(attrs.get("label") or FALLBACK_LABEL))
    return found


def _token_end(text: str, index: int) -> bool:
    return index >= len(text) or not (text[index].isalnum() or text[index] == "_")


def _match_at(
    text: str,
    start: int,
    candidates: Sequence[MentionCandidate],
) -> MentionCandidate | None:
    lowered = text.lower()
    for member in candidates:
        for key in (member.display_name, member.user_id):
            if key and lowered.startswith(key.lower(), start) and _token_end(text, start + len(key)):
                return member
    return None


def resolve_text_mentions(
    text: str,
    members: Sequence[MentionCandidate],
) -> list[dict[str, Any]]:
    """Resolve ``@Name`` tokens in plain text against ``members``.

    Longer display names win so ``@Jane Doe`` is not read as ``@Jane``. A
    token may also spell out the user id.
    """
    found: list[dict[str, Any]] = []
    seen: set[str] = set()
    by_length = sorted(members, key=lambda member: len(member.label), reverse=True)
    position = text.find("@")
    while position != -1:
        preceded_by_word = position > 0 and (text[position - 1].isalnum() or text[position - 1] == "_")
        if not preceded_by_word:
            member = _match_at(text, position + 1, by_length)
            if member is not None:
                _add(found, seen, member.user_id, member.label)
        position = text.find("@", position + 1)
    return found


def collect_mentions(
    content: Any,
    members: Sequence[MentionCandidate],
) -> list[dict[str, Any]]:
    """Return the mention payload persisted with a message.

    Rich documents contribute their mention nodes, restricted to channel
    members; plain text is resolved by name.
    """
    if parse_document(content) is None:
        return resolve_text_mentions(str(content or ""), members)
    member_ids = {member.user_id for member in members}
    return [entry for entry in extract_mentions(content) if entry["user_id"] in member_ids]
