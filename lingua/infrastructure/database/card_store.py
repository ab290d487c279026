"""SQLite card storage.

Each card is stored as its full JSON document plus a few indexed columns
used for filtering. ``CardStore`` supplies the accessor and persistence
callbacks the practice session engine expects.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import Boolean, Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lingua.domain.learning.models.card_models import Card
from lingua.domain.shared.models import Base

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class CardRecord(Base):
    """Stored flashcard."""

    __tablename__ = "cards"

    id = Column(String(64), primary_key=True)
    language = Column(String(16), nullable=False, index=True)
    front_text = Column(Text, nullable=False)
    back_text = Column(Text, nullable=False)
    next_review = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    payload = Column(Text, nullable=False)  # Card JSON document
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<CardRecord(id={self.id}, language={self.language})>"

    def apply(self, card: Card) -> None:
        """Copy ``card`` into this record."""
        self.language = card.language
        self.front_text = card.front_text
        self.back_text = card.back_text
        self.next_review = card.next_review
        self.is_archived = card.is_archived
        self.payload = card.model_dump_json()

    def to_card(self) -> Card:
        return Card.model_validate_json(self.payload)


class CardStore:
    """Card persistence backed by SQLAlchemy and SQLite."""

    def __init__(self, db_path: str | Path = "data/lingua.db") -> None:
        """Initialize card store.

        Args:
            db_path: Path to the SQLite database file, or ``":memory:"``.
        """
        if str(db_path) == IN_MEMORY:
            url = "sqlite://"
            self.db_path: Path | None = None
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{self.db_path}"

        self.engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Card store initialized at {self.db_path or IN_MEMORY}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Yields:
            Database session.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_all_cards(self, language: str | None = None) -> list[Card]:
        """All cards in creation order, optionally for one language."""
        with self.get_session() as session:
            query = session.query(CardRecord)
            if language is not None:
                query = query.filter(CardRecord.language == language)
            records = query.order_by(CardRecord.created_at, CardRecord.id).all()
            return [record.to_card() for record in records]

    def get_review_cards(
        self, language: str | None = None, now: datetime | None = None
    ) -> list[Card]:
        """Non-archived cards with at least one exercise type due."""
        now = now or datetime.now(UTC)
        with self.get_session() as session:
            query = session.query(CardRecord).filter(CardRecord.is_archived.is_(False))
            if language is not None:
                query = query.filter(CardRecord.language == language)
            records = query.order_by(CardRecord.created_at, CardRecord.id).all()
            cards = [record.to_card() for record in records]
        return [card for card in cards if card.due_exercise_types(now)]

    def get_card(self, card_id: str) -> Card | None:
        with self.get_session() as session:
            record = session.get(CardRecord, card_id)
            return record.to_card() if record else None

    def save_card(self, card: Card) -> None:
        """Insert or replace one card."""
        with self.get_session() as session:
            self._upsert(session, card)

    async def update_card(self, card: Card) -> None:
        """Persist an updated card; unknown ids raise ``KeyError``."""
        with self.get_session() as session:
            record = session.get(CardRecord, card.id)
            if record is None:
                raise KeyError(f"Card {card.id} not found")
            record.apply(card)
        logger.debug(f"Updated card {card.id}")

    def add_cards(self, cards: Iterable[Card]) -> int:
        """Insert or replace cards.

        Returns:
            Number of cards written.
        """
        count = 0
        with self.get_session() as session:
            for card in cards:
                self._upsert(session, card)
                count += 1
        logger.info(f"Stored {count} cards")
        return count

    def delete_card(self, card_id: str) -> bool:
        with self.get_session() as session:
            record = session.get(CardRecord, card_id)
            if record is None:
                return False
            session.delete(record)
        logger.info(f"Deleted card {card_id}")
        return True

    def count(self, language: str | None = None) -> int:
        with self.get_session() as session:
            query = session.query(CardRecord)
            if language is not None:
                query = query.filter(CardRecord.language == language)
            return query.count()

    @staticmethod
    def _upsert(session: Session, card: Card) -> None:
        record = session.get(CardRecord, card.id)
        if record is None:
            record = CardRecord(id=card.id, created_at=card.created_at)
            session.add(record)
        record.apply(card)
