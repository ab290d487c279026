"""Practice session orchestration.

``PracticeSessionEngine`` walks a learner through a queue of (card, exercise
type) pairs, records each outcome on the card's exercise score, persists the
updated card through an injected callback and reports completion.

The engine holds an immutable ``PracticeSessionState`` snapshot. Every
mutating operation replaces the snapshot and notifies the optional
``on_state_change`` listener at most once.

Invalid operations for the current state (answering twice, skipping an
answered item, acting on an inactive session) are silent no-ops. A failing
``update_card`` propagates to the caller after the session has already
advanced; a failing ``on_session_complete`` is logged and never propagates.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from lingua.domain.learning.models.card_models import Card
from lingua.domain.learning.models.practice_models import PracticeItem
from lingua.domain.learning.models.preferences import ExercisePreferences
from lingua.domain.learning.services.build_practice_queue import PracticeQueueBuilder
from lingua.domain.learning.services.schedule_exercise import ExerciseScheduler
from lingua.domain.shared.models import AnswerState

logger = logging.getLogger(__name__)

CardsAccessor = Callable[[], Sequence[Card]]
UpdateCardCallback = Callable[[Card], Awaitable[None]]
SessionCompleteCallback = Callable[[int], Awaitable[None]]
StateListener = Callable[["PracticeSessionState"], None]
Clock = Callable[[], datetime]

DEFAULT_OPTION_COUNT = 4


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SessionStats:
    """Aggregated numbers for display at any point of a session."""

    total_cards: int
    completed: int
    correct_count: int
    incorrect_count: int
    skipped_count: int
    accuracy: float
    duration: timedelta

    def to_dict(self) -> dict[str, float | int]:
        return {
            "total_cards": self.total_cards,
            "completed": self.completed,
            "correct_count": self.correct_count,
            "incorrect_count": self.incorrect_count,
            "skipped_count": self.skipped_count,
            "accuracy": round(self.accuracy, 3),
            "duration_seconds": int(self.duration.total_seconds()),
        }


@dataclass(frozen=True)
class PracticeSessionState:
    """Snapshot of a practice session."""

    queue: tuple[PracticeItem, ...] = ()
    current_index: int = 0
    answer_state: AnswerState = AnswerState.PENDING
    current_answer_correct: bool | None = None
    correct_count: int = 0
    incorrect_count: int = 0
    skipped_count: int = 0
    user_input: str = ""
    multiple_choice_options: tuple[str, ...] | None = None
    session_start_time: datetime | None = None
    is_session_active: bool = False
    is_session_complete: bool = False
    no_due_items: bool = False

    @property
    def current_item(self) -> PracticeItem | None:
        if not self.is_session_active or not 0 <= self.current_index < len(self.queue):
            return None
        return self.queue[self.current_index]

    @property
    def current_card(self) -> Card | None:
        item = self.current_item
        return item.card if item is not None else None

    @property
    def total_count(self) -> int:
        return len(self.queue)

    @property
    def reviewed_count(self) -> int:
        """Items resolved so far: answered, skipped or removed."""
        return self.correct_count + self.incorrect_count

    @property
    def progress(self) -> float:
        if not self.queue:
            return 0.0
        return (self.current_index + 1) / len(self.queue)

    @property
    def remaining_count(self) -> int:
        if not self.queue:
            return 0
        return len(self.queue) - self.current_index - 1

    @property
    def accuracy(self) -> float:
        if self.reviewed_count == 0:
            return 0.0
        return self.correct_count / self.reviewed_count

    @property
    def is_answered(self) -> bool:
        return self.answer_state is AnswerState.ANSWERED

    def session_duration(self, now: datetime) -> timedelta:
        if self.session_start_time is None:
            return timedelta(0)
        return now - self.session_start_time


@dataclass
class _SessionSource:
    """What the current session was built from, for rebuilds and options."""

    pool: list[Card] = field(default_factory=list)

    def replace_card(self, card: Card) -> None:
        self.pool = [card if c.id == card.id else c for c in self.pool]

    def remove_card(self, card_id: str) -> None:
        self.pool = [c for c in self.pool if c.id != card_id]


class PracticeSessionEngine:
    """Stateful controller over a practice queue.

    Not re-entrant: callers must await one mutating operation before
    starting the next on the same engine.
    """

    def __init__(
        self,
        get_all_cards: CardsAccessor,
        update_card: UpdateCardCallback,
        get_review_cards: CardsAccessor | None = None,
        on_session_complete: SessionCompleteCallback | None = None,
        on_state_change: StateListener | None = None,
        preferences: ExercisePreferences | None = None,
        scheduler: ExerciseScheduler | None = None,
        queue_builder: PracticeQueueBuilder | None = None,
        active_language: str | None = None,
        option_count: int = DEFAULT_OPTION_COUNT,
        clock: Clock = _utc_now,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            get_all_cards: Returns the full card collection
            update_card: Persists an updated card
            get_review_cards: Narrower accessor preferred over get_all_cards
            on_session_complete: Receives the number of items resolved
            on_state_change: Receives every new state snapshot
            preferences: Enabled exercise types; defaults to all implemented
            scheduler: Computes next review times
            queue_builder: Builds the due-only queue
            active_language: Only practice cards in this language
            option_count: Nominal number of multiple-choice options
            clock: Returns the current time
            rng: Random source for option sampling and shuffling
        """
        if option_count < 2:
            raise ValueError("option_count must be at least 2")

        self._get_all_cards = get_all_cards
        self._get_review_cards = get_review_cards
        self._update_card = update_card
        self._on_session_complete = on_session_complete
        self._on_state_change = on_state_change
        self._preferences = preferences or ExercisePreferences.defaults()
        self._scheduler = scheduler or ExerciseScheduler()
        self._queue_builder = queue_builder or PracticeQueueBuilder()
        self._active_language = active_language
        self._option_count = option_count
        self._clock = clock
        self._rng = rng or random.Random()

        self._state = PracticeSessionState()
        self._source = _SessionSource()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> PracticeSessionState:
        return self._state

    @property
    def preferences(self) -> ExercisePreferences:
        return self._preferences

    @property
    def is_session_active(self) -> bool:
        return self._state.is_session_active

    @property
    def current_item(self) -> PracticeItem | None:
        return self._state.current_item

    def session_stats(self) -> SessionStats:
        state = self._state
        return SessionStats(
            total_cards=state.total_count,
            completed=state.reviewed_count,
            correct_count=state.correct_count,
            incorrect_count=state.incorrect_count,
            skipped_count=state.skipped_count,
            accuracy=state.accuracy,
            duration=state.session_duration(self._clock()),
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(
        self,
        cards: Sequence[Card] | None = None,
        preferences: ExercisePreferences | None = None,
    ) -> PracticeSessionState:
        """Build the queue and start a session.

        Without ``cards`` the review accessor is used when supplied,
        otherwise the all-cards accessor. An empty queue leaves the session
        inactive with ``no_due_items`` set.
        """
        if preferences is not None:
            self._preferences = preferences
        if cards is None:
            accessor = self._get_review_cards or self._get_all_cards
            cards = accessor()

        now = self._clock()
        pool = self._queue_builder.filter_for_practice(cards, self._active_language)
        self._source = _SessionSource(pool=pool)
        queue = self._queue_builder.build(pool, self._preferences, now)

        if not queue:
            logger.info("No due practice items; session not started")
            self._set_state(PracticeSessionState(no_due_items=True))
            return self._state

        self._set_state(
            PracticeSessionState(
                queue=tuple(queue),
                session_start_time=now,
                is_session_active=True,
                multiple_choice_options=self._generate_options(queue[0]),
            )
        )
        logger.info(f"Started practice session with {len(queue)} items")
        return self._state

    def restart_session(self) -> PracticeSessionState:
        """Start over from the card accessors with fresh counters.

        An abandoned active session does not fire the completion callback.
        """
        return self.start_session()

    async def end_session(self) -> None:
        """End the session early; fires the completion callback once."""
        if not self._state.is_session_active:
            logger.debug("end_session ignored: no active session")
            return
        await self._finish(completed=False)

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def update_user_input(self, text: str) -> None:
        if not self._state.is_session_active:
            return
        self._set_state(replace(self._state, user_input=text))

    def check_answer(self, is_correct: bool) -> None:
        """Record the checked answer; only valid while pending."""
        state = self._state
        if state.current_item is None or state.answer_state is not AnswerState.PENDING:
            logger.debug("check_answer ignored: no pending item")
            return
        self._set_state(
            replace(
                state,
                answer_state=AnswerState.ANSWERED,
                current_answer_correct=is_correct,
            )
        )

    def override_answer(self, is_correct: bool) -> None:
        """Replace the checked result; only valid once answered."""
        state = self._state
        if state.current_item is None or state.answer_state is not AnswerState.ANSWERED:
            logger.debug("override_answer ignored: item not answered")
            return
        self._set_state(replace(state, current_answer_correct=is_correct))

    async def confirm_answer_and_advance(
        self, marked_correct: bool | None = None
    ) -> None:
        """Persist the outcome for the current item and move on.

        ``marked_correct`` defaults to the checked (or overridden) result.
        """
        state = self._state
        if state.current_item is None:
            logger.debug("confirm_answer_and_advance ignored: no current item")
            return
        was_correct = marked_correct
        if was_correct is None:
            was_correct = state.current_answer_correct
        if was_correct is None:
            logger.debug("confirm_answer_and_advance ignored: no answer to confirm")
            return
        await self._resolve_current(was_correct)

    async def skip_exercise(self) -> None:
        """Count the current pending item as incorrect and move on."""
        state = self._state
        if state.current_item is None or state.answer_state is AnswerState.ANSWERED:
            logger.debug("skip_exercise ignored: nothing to skip")
            return
        self._state = replace(state, skipped_count=state.skipped_count + 1)
        await self._resolve_current(False)

    # ------------------------------------------------------------------
    # Queue maintenance
    # ------------------------------------------------------------------

    async def remove_card_from_queue(self, card_id: str) -> None:
        """Drop every queue entry for ``card_id``.

        Removing the card under practice records it once as incorrect. The
        card also leaves the session pool, so later rebuilds never bring it
        back.
        """
        state = self._state
        current = state.current_item
        if current is None:
            return
        self._source.remove_card(card_id)
        if not any(i.card_id == card_id for i in state.queue):
            return

        removing_current = current.card_id == card_id
        removed_before = sum(
            1 for i in state.queue[: state.current_index] if i.card_id == card_id
        )

        updated_card: Card | None = None
        if removing_current:
            updated_card = self._record_outcome(False)

        state = self._state
        queue = tuple(i for i in state.queue if i.card_id != card_id)
        index = state.current_index - removed_before
        removed = len(state.queue) - len(queue)
        logger.info(f"Removed card {card_id} from queue ({removed} items)")

        if updated_card is None:
            self._set_state(replace(state, queue=queue, current_index=index))
            return

        self._state = replace(state, queue=queue, current_index=index)
        try:
            await self._update_card(updated_card)
        finally:
            if index >= len(queue):
                await self._finish(completed=True)
            else:
                self._set_state(self._moved_to(index))

    def update_card_in_queue(self, card: Card) -> None:
        """Swap in an externally edited card wherever it is queued."""
        self._source.replace_card(card)
        state = self._state
        if not any(i.card_id == card.id for i in state.queue):
            return

        queue = tuple(
            i.with_card(card) if i.card_id == card.id else i for i in state.queue
        )
        new_state = replace(state, queue=queue)
        current = new_state.current_item
        if current is not None and current.card_id == card.id:
            new_state = replace(
                new_state, multiple_choice_options=self._generate_options(current)
            )
        self._set_state(new_state)

    def update_exercise_preferences(
        self, preferences: ExercisePreferences, rebuild_queue: bool = True
    ) -> None:
        """Change enabled exercise types.

        With ``rebuild_queue`` an active session keeps everything up to the
        current item and rebuilds the rest for the new preferences.
        """
        self._preferences = preferences
        state = self._state
        if not rebuild_queue or not state.is_session_active:
            return

        reached = state.queue[: state.current_index + 1]
        rebuilt = self._queue_builder.build(
            self._source.pool, preferences, self._clock()
        )
        remaining = tuple(item for item in rebuilt if item not in reached)
        logger.info(f"Rebuilt queue: {len(remaining)} items after current")
        self._set_state(replace(state, queue=reached + remaining))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_state(self, state: PracticeSessionState) -> None:
        self._state = state
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(state)
        except Exception as e:
            logger.error(f"State listener failed: {e}")

    def _record_outcome(self, was_correct: bool) -> Card:
        """Apply the outcome to the current card and counters, without notifying."""
        state = self._state
        item = state.current_item
        if item is None:
            raise RuntimeError("No current item to record an outcome for")

        updated = item.card.with_exercise_result(
            item.exercise_type, was_correct, self._scheduler, self._clock()
        )
        self._source.replace_card(updated)
        queue = tuple(
            i.with_card(updated) if i.card_id == updated.id else i for i in state.queue
        )
        self._state = replace(
            state,
            queue=queue,
            correct_count=state.correct_count + (1 if was_correct else 0),
            incorrect_count=state.incorrect_count + (0 if was_correct else 1),
        )
        return updated

    async def _resolve_current(self, was_correct: bool) -> None:
        updated = self._record_outcome(was_correct)
        try:
            await self._update_card(updated)
        finally:
            next_index = self._state.current_index + 1
            if next_index >= len(self._state.queue):
                await self._finish(completed=True)
            else:
                self._set_state(self._moved_to(next_index))

    def _moved_to(self, index: int) -> PracticeSessionState:
        state = self._state
        return replace(
            state,
            current_index=index,
            answer_state=AnswerState.PENDING,
            current_answer_correct=None,
            user_input="",
            multiple_choice_options=self._generate_options(state.queue[index]),
        )

    async def _finish(self, completed: bool) -> None:
        """Fire the completion callback while still active, then tear down."""
        reviewed = self._state.reviewed_count
        self._state = replace(self._state, is_session_complete=completed)

        if self._on_session_complete is not None:
            try:
                await self._on_session_complete(reviewed)
            except Exception as e:
                logger.error(f"Session completion callback failed: {e}")

        logger.info(f"Practice session ended after {reviewed} items")
        self._set_state(PracticeSessionState(is_session_complete=completed))

    def _generate_options(self, item: PracticeItem) -> tuple[str, ...] | None:
        """Correct answer plus distinct distractors from other cards, shuffled."""
        if not item.exercise_type.is_multiple_choice:
            return None

        correct = item.card.back_text
        seen = {correct}
        candidates: list[str] = []
        for card in self._source.pool:
            if card.id == item.card_id or card.back_text in seen:
                continue
            seen.add(card.back_text)
            candidates.append(card.back_text)

        slots = min(self._option_count - 1, len(candidates))
        options = [correct, *self._rng.sample(candidates, slots)]
        self._rng.shuffle(options)
        return tuple(options)
