"""Identifier generation for new entities."""

from __future__ import annotations

from collections.abc import Callable
from uuid import uuid4

IdFactory = Callable[[], str]


def new_id() -> str:
    """Return a fresh random identifier."""
    return str(uuid4())
