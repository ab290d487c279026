"""Pytest configuration and fixtures."""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from lingua.domain.learning.models.card_models import Card

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

_ids = itertools.count(1)


def make_card(front: str = "Hallo", back: str = "Hello", **fields: Any) -> Card:
    """Build a card with sensible defaults and a unique id."""
    fields.setdefault("id", f"card-{next(_ids)}")
    fields.setdefault("language", "de")
    fields.setdefault("created_at", FIXED_NOW - timedelta(days=30))
    fields.setdefault("updated_at", FIXED_NOW - timedelta(days=30))
    return Card(front_text=front, back_text=back, **fields)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def card_factory():
    """Factory for test cards."""
    return make_card


@pytest.fixture
def vocabulary() -> list[Card]:
    """Five unrelated German cards, enough for multiple choice."""
    words = [
        ("Hund", "dog"),
        ("Katze", "cat"),
        ("Haus", "house"),
        ("Baum", "tree"),
        ("Buch", "book"),
    ]
    return [
        make_card(front, back, id=f"vocab-{i}") for i, (front, back) in enumerate(words)
    ]
