"""Tests for JSON card files."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from lingua.domain.learning.models.card_models import VerbData
from lingua.infrastructure.repositories.card_file_repository import (
    CardFileRepository,
)


class TestCardFileRepository:
    """Test CardFileRepository."""

    def test_save_and_load(self, tmp_path, card_factory):
        cards = [
            card_factory("gehen", "to go", word_data=VerbData(auxiliary="sein")),
            card_factory("Haus", "house", tags=["A1"]),
        ]
        repository = CardFileRepository(tmp_path / "out" / "cards.json")

        repository.save(cards)

        assert repository.load() == cards

    def test_load_wrapped_object(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(
            json.dumps(
                {
                    "cards": [
                        {
                            "id": "x",
                            "front_text": "Brot",
                            "back_text": "bread",
                            "language": "de",
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )

        cards = CardFileRepository(path).load()

        assert [c.front_text for c in cards] == ["Brot"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CardFileRepository(tmp_path / "missing.json").load()

    def test_invalid_card(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(
            json.dumps([{"id": "x", "front_text": "", "back_text": "b", "language": "de"}]),
            encoding="utf-8",
        )

        with pytest.raises(ValidationError):
            CardFileRepository(path).load()

    def test_non_ascii_preserved(self, tmp_path, card_factory):
        path = tmp_path / "cards.json"
        CardFileRepository(path).save([card_factory("Mädchen", "girl")])

        assert "Mädchen" in path.read_text(encoding="utf-8")
