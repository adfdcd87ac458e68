"""Review sessions: load a list, quiz it until mastered, save the results."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from lexidrill.core.judge import check_answer
from lexidrill.core.models import Direction, ListMeta, QuizMethod, WordList
from lexidrill.core.scheduler import (
    MASTERY_THRESHOLD,
    WINDOW_SIZE,
    Question,
    ReviewResult,
    ReviewScheduler,
)
from lexidrill.core.storage import ListStore

logger = logging.getLogger(__name__)

CHOICE_COUNT = 4


@dataclass
class PromptSnapshot:
    """Everything a front end needs to show one question."""

    list_name: str
    frontier: int
    total_words: int
    question: Question
    method: QuizMethod
    prompt_language: str | None = None
    answer_language: str | None = None
    choices: list[str] = field(default_factory=list)
    last_result: ReviewResult | None = None


@dataclass
class SessionResult:
    """Summary of a review session."""

    list_id: int
    list_name: str
    total_words: int
    frontier: int
    asked: int = 0
    correct: int = 0
    incorrect: int = 0
    completed: bool = False


class SessionCancelled(Exception):
    """Raised when the user quits a session. Its progress has been saved."""

    def __init__(self, result: SessionResult):
        self.result = result
        super().__init__(
            f"Session of '{result.list_name}' cancelled at {result.frontier}/{result.total_words}"
        )


class Prompter(Protocol):
    """Front end that shows questions and collects answers."""

    def render_prompt(self, snapshot: PromptSnapshot) -> None:
        """Show a question."""
        ...

    def await_answer(self) -> str | None:
        """Wait for the answer to the last rendered question, or None to quit."""
        ...


class SessionController:
    """Runs a review session over one list of a ListStore."""

    def __init__(
        self,
        store: ListStore,
        prompter: Prompter,
        rng: random.Random | None = None,
        window_size: int = WINDOW_SIZE,
        mastery_threshold: int = MASTERY_THRESHOLD,
    ):
        self.store = store
        self.prompter = prompter
        self.rng = rng or random.Random()
        self.window_size = window_size
        self.mastery_threshold = mastery_threshold

    def run(
        self,
        list_id: int,
        method: QuizMethod = QuizMethod.WRITE,
        direction: Direction = Direction.AUTO,
        shuffle: bool = False,
        reset: bool = False,
    ) -> SessionResult:
        """Quiz a list until every word is mastered.

        The word list and then the index are saved whether the session
        completes or is cancelled, so word statistics are written before the
        resume cursor.

        Raises:
            StoreError: If the list can't be found or loaded.
            SessionCancelled: If the prompter returned None. Progress is saved first.
        """
        meta = self.store.get(list_id)
        words = self.store.load_words(meta, list_id)

        if reset:
            meta.clear_progress()

        result = SessionResult(
            list_id=list_id,
            list_name=meta.name,
            total_words=len(words.words),
            frontier=0,
        )
        if not words.words:
            result.completed = True
            return result

        scheduler = ReviewScheduler(
            words,
            meta,
            direction=direction,
            shuffle=shuffle,
            resume=not reset,
            window_size=self.window_size,
            mastery_threshold=self.mastery_threshold,
            rng=self.rng,
        )
        logger.info(
            "Starting session of '%s' at %d/%d (%s, %s)",
            meta.name,
            scheduler.frontier,
            scheduler.total_words,
            method,
            direction,
        )

        cancelled = False
        try:
            cancelled = not self._drive(scheduler, meta, method)
        finally:
            if scheduler.is_finished:
                scheduler.clear_progress()
            else:
                scheduler.save_progress()
            self._persist(meta, words)

            result.frontier = scheduler.frontier
            result.asked = scheduler.stats.asked
            result.correct = scheduler.stats.correct
            result.incorrect = scheduler.stats.incorrect
            result.completed = scheduler.is_finished

        if cancelled:
            logger.info("Session of '%s' cancelled at %d", meta.name, scheduler.frontier)
            raise SessionCancelled(result)
        return result

    def _drive(self, scheduler: ReviewScheduler, meta: ListMeta, method: QuizMethod) -> bool:
        """Ask questions until the list is mastered. Returns False if cancelled."""
        last_result: ReviewResult | None = None

        while not scheduler.is_finished:
            question = scheduler.next_question()
            choices: list[str] = []
            if method == QuizMethod.MULTIPLE_CHOICE:
                choices = self._choices(scheduler, question)
            snapshot = PromptSnapshot(
                list_name=meta.name,
                frontier=scheduler.frontier,
                total_words=scheduler.total_words,
                question=question,
                method=method,
                choices=choices,
                last_result=last_result,
            )
            if question.direction == Direction.DEF_TO_TERM:
                snapshot.prompt_language = meta.definition_language
                snapshot.answer_language = meta.term_language
            else:
                snapshot.prompt_language = meta.term_language
                snapshot.answer_language = meta.definition_language

            self.prompter.render_prompt(snapshot)
            answer = self.prompter.await_answer()
            if answer is None:
                return False

            correct = check_answer(method, answer, question.answers)
            last_result = scheduler.record_answer(question, correct, answer)

        return True

    def _choices(self, scheduler: ReviewScheduler, question: Question) -> list[str]:
        """Build multiple choice options: the right answer plus distractors."""
        answer = ", ".join(question.answers)
        options = {answer}

        others = [i for i in range(scheduler.total_words) if i != question.word_index]
        self.rng.shuffle(others)
        for index in others:
            if len(options) >= CHOICE_COUNT:
                break
            entry = scheduler.words.words[index]
            side = entry.terms if question.direction == Direction.DEF_TO_TERM else entry.definitions
            option = ", ".join(side)
            # Only the right answer may pass the judge
            if not check_answer(QuizMethod.MULTIPLE_CHOICE, option, question.answers):
                options.add(option)

        choices = sorted(options)
        self.rng.shuffle(choices)
        return choices

    def _persist(self, meta: ListMeta, words: WordList) -> None:
        """Write the words first and the index second."""
        self.store.save_words(meta, words)
        meta.touch()
        self.store.save_index()
