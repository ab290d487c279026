"""Duplicate card detection.

``DuplicateDetector`` is the synchronous, side-effect-free engine;
``DetectDuplicates`` wraps it as an async domain service that validates the
request, logs timing and announces the outcome on the event bus.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from lingua.domain.duplicates.events.duplicate_events import DuplicatesDetectedEvent
from lingua.domain.duplicates.models.duplicate_models import (
    DuplicateDetectionConfig,
    DuplicateMatch,
)
from lingua.domain.duplicates.services import match_strategies
from lingua.domain.learning.models.card_models import Card
from lingua.domain.shared.services import (
    DomainService,
    ValidationError,
    log_domain_operation,
    validate_request,
)
from lingua.infrastructure.messaging.event_bus import EventBus

logger = logging.getLogger(__name__)

DuplicateMap = dict[str, list[DuplicateMatch]]


def _is_better(candidate: DuplicateMatch | None, best: DuplicateMatch | None) -> bool:
    # Strict comparison: on a tie the earlier strategy keeps its place
    if candidate is None:
        return False
    return best is None or candidate.similarity_score > best.similarity_score


class DuplicateDetector:
    """Find likely duplicate cards using layered string heuristics."""

    def __init__(self, config: DuplicateDetectionConfig | None = None) -> None:
        self.config = config or DuplicateDetectionConfig.standard()

    def find_best_match(self, card: Card, candidate: Card) -> DuplicateMatch | None:
        """Single best-ranked match for one ordered pair, if any."""
        config = self.config

        if config.check_exact_match:
            exact = match_strategies.exact_match(card, candidate)
            if exact is not None:
                return exact

        best: DuplicateMatch | None = None
        checks = (
            (config.check_case_insensitive, match_strategies.case_insensitive_match),
            (
                config.check_normalized_whitespace,
                match_strategies.normalized_whitespace_match,
            ),
            (
                config.check_same_front_different_back,
                match_strategies.same_front_different_back,
            ),
            (
                config.check_same_back_different_front,
                match_strategies.same_back_different_front,
            ),
        )
        for enabled, strategy in checks:
            if not enabled:
                continue
            match = strategy(card, candidate)
            if _is_better(match, best):
                best = match

        if best is None and config.check_fuzzy_match:
            best = match_strategies.fuzzy_match(
                card, candidate, config.fuzzy_threshold
            )

        return best

    def find_duplicates(
        self, card: Card, candidates: Sequence[Card]
    ) -> list[DuplicateMatch]:
        """Duplicates of ``card`` among ``candidates``, best first."""
        matches: list[DuplicateMatch] = []
        for candidate in candidates:
            if candidate.id == card.id:
                continue
            if self.config.same_language_only and candidate.language != card.language:
                continue
            match = self.find_best_match(card, candidate)
            if match is not None:
                matches.append(match)

        matches.sort(key=lambda m: m.similarity_score, reverse=True)
        return matches

    def find_all_duplicates(self, cards: Sequence[Card]) -> DuplicateMap:
        """Map each card id to its duplicates; cards without any are omitted."""
        duplicate_map: DuplicateMap = {}
        for card in cards:
            matches = self.find_duplicates(card, cards)
            if matches:
                duplicate_map[card.id] = matches

        logger.debug(
            f"Scanned {len(cards)} cards, {len(duplicate_map)} have duplicates"
        )
        return duplicate_map

    def has_duplicates(self, card: Card, cards: Sequence[Card]) -> bool:
        return bool(self.find_duplicates(card, cards))

    def get_cards_with_duplicates(self, cards: Sequence[Card]) -> list[Card]:
        """Cards (in input order) that have at least one duplicate."""
        duplicate_map = self.find_all_duplicates(cards)
        return [card for card in cards if card.id in duplicate_map]


@dataclass
class DetectDuplicatesRequest:
    """Request DTO for scanning a card collection."""

    cards: list[Card]
    language: str | None = None
    preset: str | None = None
    config: DuplicateDetectionConfig | None = None

    def __post_init__(self) -> None:
        """Validate request data."""
        if self.preset is not None and self.config is not None:
            raise ValueError("Pass either preset or config, not both")


@dataclass
class DetectDuplicatesResult:
    """Result DTO for a duplicate scan."""

    duplicate_map: DuplicateMap = field(default_factory=dict)
    cards_analyzed: int = 0

    @property
    def duplicate_count(self) -> int:
        """Number of cards that have at least one duplicate."""
        return len(self.duplicate_map)

    @property
    def card_ids_with_duplicates(self) -> set[str]:
        return set(self.duplicate_map)

    def card_has_duplicates(self, card_id: str) -> bool:
        return card_id in self.duplicate_map

    def get_duplicates_for_card(self, card_id: str) -> list[DuplicateMatch]:
        return self.duplicate_map.get(card_id, [])

    def filter_cards_with_duplicates(self, cards: Sequence[Card]) -> list[Card]:
        return [card for card in cards if card.id in self.duplicate_map]


def _validate_detect_request(request: DetectDuplicatesRequest) -> None:
    if request.language is not None and not request.language.strip():
        raise ValidationError("language cannot be blank", "language")
    if request.preset is not None:
        # Raises ValidationError for unknown names
        DuplicateDetectionConfig.from_preset(request.preset)


class DetectDuplicates(DomainService[DetectDuplicatesRequest, DetectDuplicatesResult]):
    """Scan cards for duplicates and publish ``DuplicatesDetectedEvent``."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__(event_bus)

    @log_domain_operation
    @validate_request(_validate_detect_request)
    async def call(self, request: DetectDuplicatesRequest) -> DetectDuplicatesResult:
        """Scan ``request.cards``, optionally restricted to one language.

        Args:
            request: Cards plus an optional language filter and preset/config

        Returns:
            The duplicate map and summary counts

        Raises:
            ValidationError: If the preset name is unknown
        """
        if request.config is not None:
            config = request.config
        else:
            config = DuplicateDetectionConfig.from_preset(request.preset or "standard")

        cards = request.cards
        if request.language is not None:
            cards = [card for card in cards if card.language == request.language]

        detector = DuplicateDetector(config)
        duplicate_map = detector.find_all_duplicates(cards)
        result = DetectDuplicatesResult(
            duplicate_map=duplicate_map, cards_analyzed=len(cards)
        )

        self.logger.info(
            f"Found {result.duplicate_count} cards with duplicates "
            f"among {len(cards)} analysed"
        )

        await self._publish_event(
            DuplicatesDetectedEvent(
                cards_analyzed=len(cards),
                duplicate_count=result.duplicate_count,
                card_ids_with_duplicates=sorted(result.card_ids_with_duplicates),
                language=request.language,
                preset=request.preset,
            )
        )
        return result
