"""Repository for importing and exporting card collections as JSON files."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter

from lingua.domain.learning.models.card_models import Card

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(list[Card])


class CardFileRepository:
    """Read and write card lists as JSON arrays."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[Card]:
        """Load and validate every card in the file.

        Raises:
            FileNotFoundError: If the file does not exist
            pydantic.ValidationError: If any card is malformed
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Cards file not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            # Accept {"cards": [...]} exports as well as bare arrays
            data = data.get("cards", [])

        cards = _CARD_LIST.validate_python(data)
        logger.info(f"Loaded {len(cards)} cards from {self.path}")
        return cards

    def save(self, cards: Sequence[Card]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = _CARD_LIST.dump_python(list(cards), mode="json")
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        logger.info(f"Saved {len(cards)} cards to {self.path}")
