"""Pydantic models for word lists, their entries and the list index."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class Direction(StrEnum):
    """Which side of an entry is asked and which side is expected back."""

    AUTO = "auto"
    TERM_TO_DEF = "term-to-def"
    DEF_TO_TERM = "def-to-term"
    BOTH = "both"

    def merge(self, other: Direction) -> Direction:
        """Combine a session direction with an entry direction.

        ``AUTO`` yields the other operand and ``BOTH`` wins over everything
        else. Between the two fixed directions, ``DEF_TO_TERM`` wins.
        """
        if self is Direction.AUTO:
            return other
        if other is Direction.AUTO:
            return self
        if self is Direction.BOTH or other is Direction.BOTH:
            return Direction.BOTH
        if self is Direction.TERM_TO_DEF and other is Direction.TERM_TO_DEF:
            return Direction.TERM_TO_DEF
        # TERM_TO_DEF with DEF_TO_TERM, and DEF_TO_TERM with itself
        return Direction.DEF_TO_TERM

    def __and__(self, other: Direction) -> Direction:
        return self.merge(other)

    @property
    def label(self) -> str:
        """Human readable name used in prompts."""
        labels = {
            Direction.AUTO: "automatic",
            Direction.TERM_TO_DEF: "term -> definition",
            Direction.DEF_TO_TERM: "definition -> term",
            Direction.BOTH: "both",
        }
        return labels[self]


class QuizMethod(StrEnum):
    """How the user answers a question."""

    WRITE = "write"  # type the answer
    MULTIPLE_CHOICE = "multiple-choice"  # pick one of the offered options


class WordEntry(BaseModel):
    """A term (with synonyms) and its acceptable definitions."""

    terms: list[str]
    definitions: list[str]
    direction: Direction = Direction.TERM_TO_DEF
    times_answered_correctly: int = Field(default=0, ge=0)


class WordList(BaseModel):
    """The contents of a single list file."""

    words: list[WordEntry] = Field(default_factory=list)


class ListMeta(BaseModel):
    """Index entry describing one word list."""

    name: str
    uuid: Annotated[UUID, Field(default_factory=lambda: uuid4())]
    term_language: str | None = None
    definition_language: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    last_modified: datetime = Field(default_factory=utcnow)
    folder: str | None = None

    # Resume state of an interrupted review session
    progress: int | None = Field(default=None, ge=0)
    shuffle_map: dict[int, int] | None = None

    def touch(self) -> None:
        """Update the last_modified timestamp."""
        self.last_modified = utcnow()

    def clear_progress(self) -> None:
        """Forget any saved review session."""
        self.progress = None
        self.shuffle_map = None


class ListIndex(BaseModel):
    """Ordered collection of list metadata. A list's ID is its 1-based position."""

    lists: list[ListMeta] = Field(default_factory=list)
