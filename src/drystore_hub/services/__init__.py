# src/drystore_hub/services/__init__.py
"""Business logic services for the DryStore Hub application."""

from .change_feed import ChangeFeed, get_change_feed
from .mentions import MentionCandidate, MentionSuggester
from .read_tracking import ReadConfirmationGate, ReadGateError
from .storage import ObjectStorage, get_storage

__all__ = [
    "ChangeFeed",
    "get_change_feed",
    "MentionCandidate",
    "MentionSuggester",
    "ReadConfirmationGate",
    "ReadGateError",
    "ObjectStorage",
    "get_storage",
]
