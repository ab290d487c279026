"""Tests for the lingua command line tool."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from lingua.cli.main import _ask, cli
from lingua.core.practice_session import PracticeSessionEngine
from lingua.domain.shared.models import ExerciseType
from lingua.infrastructure.database.card_store import CardStore


def _card(card_id: str, front: str, back: str, **extra) -> dict:
    return {"id": card_id, "front_text": front, "back_text": back, "language": "de", **extra}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "lingua.db")


@pytest.fixture
def cards_file(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text(
        json.dumps(
            [
                _card("1", "Hallo", "Hello", created_at="2024-01-01T00:00:00Z"),
                _card("2", "Hallo", "Hello", created_at="2024-01-02T00:00:00Z"),
                _card("3", "Tschüss", "Bye", created_at="2024-01-03T00:00:00Z"),
            ]
        ),
        encoding="utf-8",
    )
    return path


class TestCli:
    """Test CLI commands."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("import-cards", "export-cards", "duplicates", "due", "practice"):
            assert command in result.output

    def test_import_cards(self, runner, db_path, cards_file):
        result = runner.invoke(cli, ["--db", db_path, "import-cards", str(cards_file)])

        assert result.exit_code == 0
        assert "Imported 3 cards" in result.output
        assert CardStore(db_path).count() == 3

    def test_import_invalid_file(self, runner, db_path, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([_card("1", "", "Hello")]), encoding="utf-8")

        result = runner.invoke(cli, ["--db", db_path, "import-cards", str(path)])

        assert result.exit_code == 1
        assert "Invalid cards file" in result.output

    def test_export_cards(self, runner, db_path, cards_file, tmp_path):
        runner.invoke(cli, ["--db", db_path, "import-cards", str(cards_file)])
        out = tmp_path / "export.json"

        result = runner.invoke(cli, ["--db", db_path, "export-cards", str(out)])

        assert result.exit_code == 0
        exported = json.loads(out.read_text(encoding="utf-8"))
        assert [c["id"] for c in exported] == ["1", "2", "3"]

    def test_duplicates(self, runner, db_path, cards_file):
        runner.invoke(cli, ["--db", db_path, "import-cards", str(cards_file)])

        result = runner.invoke(cli, ["--db", db_path, "duplicates"])

        assert result.exit_code == 0
        assert "2 of 3 cards have duplicates" in result.output

    def test_duplicates_other_language(self, runner, db_path, cards_file):
        runner.invoke(cli, ["--db", db_path, "import-cards", str(cards_file)])

        result = runner.invoke(cli, ["--db", db_path, "duplicates", "--language", "es"])

        assert result.exit_code == 0
        assert "No duplicates among 0 cards" in result.output

    def test_duplicates_rejects_unknown_preset(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path, "duplicates", "--preset", "nope"])
        assert result.exit_code != 0

    def test_due(self, runner, db_path, cards_file):
        runner.invoke(cli, ["--db", db_path, "import-cards", str(cards_file)])

        result = runner.invoke(cli, ["--db", db_path, "due"])

        assert result.exit_code == 0
        assert "Due Exercises (9)" in result.output

    def test_due_nothing(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path, "due"])

        assert result.exit_code == 0
        assert "Nothing is due" in result.output

    def test_practice_session(self, runner, db_path, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps([_card("solo", "Brot", "bread")]), encoding="utf-8")
        runner.invoke(cli, ["--db", db_path, "import-cards", str(path)])

        result = runner.invoke(
            cli,
            ["--db", db_path, "practice", "--type", "writing_translation"],
            input="Bread\n",
        )

        assert result.exit_code == 0
        assert "Correct" in result.output
        assert "Session complete: 1 reviewed" in result.output
        card = CardStore(db_path).get_card("solo")
        score = card.exercise_scores[ExerciseType.WRITING_TRANSLATION]
        assert score.correct_count == 1
        assert score.current_streak == 1

    def test_practice_skip(self, runner, db_path, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps([_card("solo", "Brot", "bread")]), encoding="utf-8")
        runner.invoke(cli, ["--db", db_path, "import-cards", str(path)])

        result = runner.invoke(
            cli,
            ["--db", db_path, "practice", "--type", "reverse_translation"],
            input="\n",
        )

        assert result.exit_code == 0
        card = CardStore(db_path).get_card("solo")
        assert card.exercise_scores[ExerciseType.REVERSE_TRANSLATION].incorrect_count == 1

    def test_practice_nothing_due(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path, "practice"])

        assert result.exit_code == 0
        assert "Nothing is due" in result.output

    def test_import_and_export_default_to_configured_file(
        self, runner, db_path, cards_file, tmp_path, monkeypatch
    ):
        monkeypatch.setenv("LINGUA_CARDS_JSON_PATH", str(cards_file))
        result = runner.invoke(cli, ["--db", db_path, "import-cards"])
        assert result.exit_code == 0
        assert CardStore(db_path).count() == 3

        exported = tmp_path / "exported.json"
        monkeypatch.setenv("LINGUA_CARDS_JSON_PATH", str(exported))
        result = runner.invoke(cli, ["--db", db_path, "export-cards"])
        assert result.exit_code == 0
        assert len(json.loads(exported.read_text(encoding="utf-8"))) == 3

    def test_import_missing_file(self, runner, db_path, tmp_path):
        missing = tmp_path / "missing.json"

        result = runner.invoke(cli, ["--db", db_path, "import-cards", str(missing)])

        assert result.exit_code == 1
        assert "Cards file not found" in result.output

    def test_practice_uses_review_cards(self, runner, db_path):
        with patch.object(
            CardStore, "get_review_cards", autospec=True, return_value=[]
        ) as get_review_cards:
            result = runner.invoke(cli, ["--db", db_path, "practice"])

        assert result.exit_code == 0
        assert "Nothing is due" in result.output
        get_review_cards.assert_called_once()

    def test_ask_without_active_item_raises(self):
        engine = PracticeSessionEngine(
            get_all_cards=list, update_card=AsyncMock()
        )

        with pytest.raises(RuntimeError):
            _ask(engine)
