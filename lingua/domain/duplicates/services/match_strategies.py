"""Pairwise duplicate-match strategies.

Each strategy compares a source card to one candidate and returns a
``DuplicateMatch`` describing the candidate, or ``None``.
"""

from __future__ import annotations

from lingua.domain.duplicates.models.duplicate_models import (
    DuplicateMatch,
    DuplicateMatchStrategy,
)
from lingua.domain.learning.models.card_models import Card
from lingua.utils.text_similarity import normalize_text, similarity

EXACT_SCORE = 1.0
CASE_INSENSITIVE_SCORE = 0.98
NORMALIZED_WHITESPACE_SCORE = 0.95
SAME_FRONT_SCORE = 0.90
SAME_BACK_SCORE = 0.85


def _is_exact(card: Card, candidate: Card) -> bool:
    return (
        card.front_text == candidate.front_text
        and card.back_text == candidate.back_text
    )


def _is_case_equal(card: Card, candidate: Card) -> bool:
    return (
        card.front_text.lower() == candidate.front_text.lower()
        and card.back_text.lower() == candidate.back_text.lower()
    )


def exact_match(card: Card, candidate: Card) -> DuplicateMatch | None:
    if not _is_exact(card, candidate):
        return None
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=EXACT_SCORE,
        strategy=DuplicateMatchStrategy.EXACT_MATCH,
        reason="Exact duplicate",
    )


def case_insensitive_match(card: Card, candidate: Card) -> DuplicateMatch | None:
    if _is_exact(card, candidate) or not _is_case_equal(card, candidate):
        return None
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=CASE_INSENSITIVE_SCORE,
        strategy=DuplicateMatchStrategy.CASE_INSENSITIVE,
        reason="Same content (case differs)",
    )


def normalized_whitespace_match(card: Card, candidate: Card) -> DuplicateMatch | None:
    if _is_case_equal(card, candidate):
        return None
    if normalize_text(card.front_text) != normalize_text(candidate.front_text):
        return None
    if normalize_text(card.back_text) != normalize_text(candidate.back_text):
        return None
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=NORMALIZED_WHITESPACE_SCORE,
        strategy=DuplicateMatchStrategy.NORMALIZED_WHITESPACE,
        reason="Same content (whitespace differs)",
    )


def same_front_different_back(card: Card, candidate: Card) -> DuplicateMatch | None:
    """Same term with another translation; possibly inconsistent cards."""
    if normalize_text(card.front_text) != normalize_text(candidate.front_text):
        return None
    if normalize_text(card.back_text) == normalize_text(candidate.back_text):
        return None
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=SAME_FRONT_SCORE,
        strategy=DuplicateMatchStrategy.SAME_FRONT_DIFFERENT_BACK,
        reason="Same term, different translation",
    )


def same_back_different_front(card: Card, candidate: Card) -> DuplicateMatch | None:
    """Different terms with one translation; possibly synonyms."""
    if normalize_text(card.back_text) != normalize_text(candidate.back_text):
        return None
    if normalize_text(card.front_text) == normalize_text(candidate.front_text):
        return None
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=SAME_BACK_SCORE,
        strategy=DuplicateMatchStrategy.SAME_BACK_DIFFERENT_FRONT,
        reason="Same translation, different terms (synonyms?)",
    )


def fuzzy_match(card: Card, candidate: Card, threshold: float) -> DuplicateMatch | None:
    """Both sides at least ``threshold`` similar; score is their average."""
    front_similarity = similarity(
        normalize_text(card.front_text), normalize_text(candidate.front_text)
    )
    if front_similarity < threshold:
        return None
    back_similarity = similarity(
        normalize_text(card.back_text), normalize_text(candidate.back_text)
    )
    if back_similarity < threshold:
        return None

    score = (front_similarity + back_similarity) / 2
    return DuplicateMatch(
        duplicate_card=candidate,
        similarity_score=score,
        strategy=DuplicateMatchStrategy.FUZZY_MATCH,
        reason=f"Similar content ({round(score * 100)}% match)",
    )
