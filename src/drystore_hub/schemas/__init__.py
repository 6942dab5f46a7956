# src/drystore_hub/schemas/__init__.py
"""Pydantic request and response schemas."""
