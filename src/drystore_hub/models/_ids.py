"""Primary key helpers shared by the models."""

import uuid


def new_id() -> str:
    """Return a random UUID4 string used as a row identifier."""
    return str(uuid.uuid4())
