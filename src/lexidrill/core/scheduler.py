"""Rotation-buffer scheduler for a single review session."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field

from lexidrill.core.models import Direction, ListMeta, WordList

logger = logging.getLogger(__name__)

WINDOW_SIZE = 10
MASTERY_THRESHOLD = 3


@dataclass
class Question:
    """A word as it is asked: which side is shown and which side is expected."""

    word_index: int
    prompt: list[str]
    answers: list[str]
    direction: Direction  # TERM_TO_DEF or DEF_TO_TERM, as displayed
    progress: int


@dataclass
class ReviewResult:
    """Outcome of answering a question."""

    question: Question
    correct: bool
    guess: str
    progress: int
    retired: bool
    times_answered_correctly: int
    frontier: int


@dataclass
class _Slot:
    word_index: int
    progress: int = 0


@dataclass
class SchedulerStats:
    """Running counts for a session."""

    asked: int = 0
    correct: int = 0
    incorrect: int = 0
    retired: list[int] = field(default_factory=list)


class ReviewScheduler:
    """Decides which word to ask next and when a word is mastered.

    Up to ``window_size`` words are "in rotation" at a time. The front word is
    asked and goes to the back again, so a word comes back a few questions
    later. A word retires after ``mastery_threshold`` correct answers (wrong
    answers don't undo progress) and the next word in order takes its place.
    ``frontier`` counts retired words and is what a resumed session continues
    from.

    The scheduler owns ``words`` and ``meta`` for the duration of the session
    and mutates them in place: ``times_answered_correctly`` on every correct
    answer, ``progress``/``shuffle_map`` through ``save_progress()`` and
    ``clear_progress()``.
    """

    def __init__(
        self,
        words: WordList,
        meta: ListMeta,
        direction: Direction = Direction.AUTO,
        shuffle: bool = False,
        resume: bool = True,
        window_size: int = WINDOW_SIZE,
        mastery_threshold: int = MASTERY_THRESHOLD,
        rng: random.Random | None = None,
    ):
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        if mastery_threshold < 1:
            raise ValueError("mastery_threshold must be at least 1")

        self.words = words
        self.meta = meta
        self.direction = direction
        self.window_size = window_size
        self.mastery_threshold = mastery_threshold
        self.swap_threshold = mastery_threshold // 2
        self.rng = rng or random.Random()
        self.stats = SchedulerStats()

        self.total_words = len(words.words)
        self.frontier, self.order = self._initial_state(shuffle, resume)

        # Words before this position were retired in an earlier session
        self._start = start = self.frontier
        self.next_position = min(start + window_size, self.total_words)
        self.rotation: deque[_Slot] = deque(
            _Slot(self.order[position]) for position in range(start, self.next_position)
        )
        self._current: _Slot | None = None

    def _initial_state(self, shuffle: bool, resume: bool) -> tuple[int, list[int]]:
        """Work out the starting frontier and word order."""
        total = self.total_words
        frontier = 0
        order: list[int] | None = None

        if resume:
            saved_map = self.meta.shuffle_map
            if saved_map is not None:
                order = _order_from_map(saved_map, total)
                if order is None:
                    logger.warning(
                        "Discarding saved shuffle of '%s': it does not match the %d words",
                        self.meta.name,
                        total,
                    )
            progress = self.meta.progress
            # A cursor into a discarded shuffle means nothing
            if progress is not None and (saved_map is None or order is not None):
                if 0 <= progress <= total:
                    frontier = progress
                else:
                    logger.warning(
                        "Discarding saved progress %d of '%s' (%d words)",
                        progress,
                        self.meta.name,
                        total,
                    )

        if order is not None:
            return frontier, order

        # Saved progress without a map refers to the identity order
        if shuffle and frontier == 0:
            order = list(range(total))
            self.rng.shuffle(order)
            return frontier, order

        return frontier, list(range(total))

    @property
    def is_finished(self) -> bool:
        return self.frontier >= self.total_words

    @property
    def in_rotation(self) -> int:
        """Number of words in flight, including the one currently asked."""
        return len(self.rotation) + (1 if self._current is not None else 0)

    def effective_direction(self, word_index: int) -> Direction:
        """Merge the session direction with a word's own direction."""
        return self.direction.merge(self.words.words[word_index].direction)

    def next_question(self) -> Question:
        """Take the front word of the rotation and build its question."""
        if self._current is not None:
            raise RuntimeError("The current question has not been answered yet")
        if self.is_finished:
            raise RuntimeError("All words are mastered")

        slot = self.rotation.popleft()
        self._current = slot
        entry = self.words.words[slot.word_index]

        direction = self.effective_direction(slot.word_index)
        swap = direction == Direction.DEF_TO_TERM or (
            direction == Direction.BOTH and slot.progress > self.swap_threshold
        )
        if swap:
            return Question(
                word_index=slot.word_index,
                prompt=list(entry.definitions),
                answers=list(entry.terms),
                direction=Direction.DEF_TO_TERM,
                progress=slot.progress,
            )
        return Question(
            word_index=slot.word_index,
            prompt=list(entry.terms),
            answers=list(entry.definitions),
            direction=Direction.TERM_TO_DEF,
            progress=slot.progress,
        )

    def record_answer(self, question: Question, correct: bool, guess: str = "") -> ReviewResult:
        """Apply the judgement of the current question to the rotation."""
        slot = self._current
        if slot is None or slot.word_index != question.word_index:
            raise RuntimeError("No matching question is waiting for an answer")
        self._current = None

        entry = self.words.words[slot.word_index]
        self.stats.asked += 1
        retired = False

        if correct:
            self.stats.correct += 1
            entry.times_answered_correctly += 1
            slot.progress += 1
            if slot.progress >= self.mastery_threshold:
                retired = True
                self._retire(slot)
            else:
                self.rotation.append(slot)
        else:
            self.stats.incorrect += 1
            self.rotation.append(slot)

        return ReviewResult(
            question=question,
            correct=correct,
            guess=guess,
            progress=slot.progress,
            retired=retired,
            times_answered_correctly=entry.times_answered_correctly,
            frontier=self.frontier,
        )

    def _retire(self, slot: _Slot) -> None:
        self.frontier += 1
        self.stats.retired.append(slot.word_index)
        logger.debug(
            "Word %d retired, %d/%d done", slot.word_index, self.frontier, self.total_words
        )
        if self.next_position < self.total_words:
            self.rotation.append(_Slot(self.order[self.next_position]))
            self.next_position += 1

    def resume_order(self) -> list[int]:
        """The word order a resumed session should continue from.

        Retired words come first, so exactly ``frontier`` positions are done
        even when words retired out of order. Words in rotation follow, then the
        words that were never admitted.
        """
        in_flight = [self._current] if self._current is not None else []
        in_flight.extend(self.rotation)
        return [
            *self.order[: self._start],
            *self.stats.retired,
            *(slot.word_index for slot in in_flight),
            *self.order[self.next_position :],
        ]

    def save_progress(self) -> None:
        """Store the frontier and word order on the list so the session can be resumed."""
        order = self.resume_order()
        self.meta.progress = self.frontier
        identity = list(range(self.total_words))
        self.meta.shuffle_map = dict(enumerate(order)) if order != identity else None

    def clear_progress(self) -> None:
        self.meta.clear_progress()


def _order_from_map(shuffle_map: dict[int, int], total: int) -> list[int] | None:
    """Turn a saved position -> index map into an order, or None if it isn't a bijection."""
    if sorted(shuffle_map) != list(range(total)):
        return None
    order = [shuffle_map[position] for position in range(total)]
    if sorted(order) != list(range(total)):
        return None
    return order
