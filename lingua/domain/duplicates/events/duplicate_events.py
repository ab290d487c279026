"""Duplicate detection domain events."""

from __future__ import annotations

from dataclasses import dataclass, field

from lingua.infrastructure.messaging.event_bus import DomainEvent


@dataclass
class DuplicatesDetectedEvent(DomainEvent):
    """Event emitted after a card collection has been scanned for duplicates."""

    cards_analyzed: int
    duplicate_count: int
    card_ids_with_duplicates: list[str] = field(default_factory=list)
    language: str | None = None
    preset: str | None = None

    def __post_init__(self) -> None:
        """Initialize parent DomainEvent fields."""
        super().__init__()
