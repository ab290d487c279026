"""Tests for the SQLite card store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lingua.domain.learning.models.card_models import ExerciseScore, NounData
from lingua.domain.shared.models import ExerciseType
from lingua.infrastructure.database.card_store import CardRecord, CardStore


@pytest.fixture
def store():
    return CardStore(":memory:")


class TestCardStore:
    """Test CardStore."""

    def test_file_database_created(self, tmp_path):
        db_path = tmp_path / "nested" / "cards.db"

        store = CardStore(db_path)

        assert db_path.exists()
        assert store.count() == 0

    def test_add_and_get(self, store, card_factory):
        card = card_factory("Tisch", "table", word_data=NounData(gender="der"))

        assert store.add_cards([card]) == 1

        loaded = store.get_card(card.id)
        assert loaded == card
        assert isinstance(loaded.word_data, NounData)

    def test_add_cards_replaces_existing(self, store, card_factory):
        card = card_factory("Tisch", "table")
        store.add_cards([card])

        store.add_cards([card.model_copy(update={"back_text": "desk"})])

        assert store.count() == 1
        assert store.get_card(card.id).back_text == "desk"

    def test_get_all_cards_ordered_and_filtered(self, store, card_factory, now):
        older = card_factory("alt", "old", created_at=now - timedelta(days=2))
        newer = card_factory("neu", "new", created_at=now - timedelta(days=1))
        spanish = card_factory("viejo", "old", language="es", created_at=now)
        store.add_cards([newer, spanish, older])

        assert [c.id for c in store.get_all_cards()] == [older.id, newer.id, spanish.id]
        assert [c.id for c in store.get_all_cards("es")] == [spanish.id]
        assert store.count("de") == 2

    def test_get_review_cards(self, store, card_factory, now):
        due = card_factory("fällig", "due")
        later = card_factory("später", "later", next_review=now + timedelta(days=3))
        archived = card_factory("archiviert", "archived", is_archived=True)
        score_due = card_factory(
            "Wiederholung",
            "repetition",
            next_review=now + timedelta(days=3),
            exercise_scores={
                ExerciseType.READING_RECOGNITION: ExerciseScore(
                    type=ExerciseType.READING_RECOGNITION,
                    incorrect_count=1,
                    next_review=now - timedelta(hours=1),
                )
            },
        )
        store.add_cards([due, later, archived, score_due])

        review_ids = {c.id for c in store.get_review_cards(now=now)}

        assert review_ids == {due.id, score_due.id}

    @pytest.mark.asyncio
    async def test_update_card(self, store, card_factory):
        card = card_factory()
        store.add_cards([card])

        await store.update_card(card.model_copy(update={"review_count": 4}))

        assert store.get_card(card.id).review_count == 4

    @pytest.mark.asyncio
    async def test_update_unknown_card_raises(self, store, card_factory):
        with pytest.raises(KeyError):
            await store.update_card(card_factory())

    def test_delete_card(self, store, card_factory):
        card = card_factory()
        store.save_card(card)

        assert store.delete_card(card.id) is True
        assert store.delete_card(card.id) is False
        assert store.get_card(card.id) is None

    def test_record_indexed_columns(self, store, card_factory):
        card = card_factory("Hund", "dog", is_archived=True)
        store.save_card(card)

        with store.get_session() as session:
            record = session.get(CardRecord, card.id)
            assert record.language == "de"
            assert record.front_text == "Hund"
            assert record.is_archived is True
            assert "CardRecord" in repr(record)
