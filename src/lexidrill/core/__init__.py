"""Core library for lexidrill."""

from lexidrill.core.errors import (
    CollisionError,
    DeserializationError,
    IdUnderflowError,
    ListNotFoundError,
    MissingListFileError,
    ParseError,
    StoreError,
)
from lexidrill.core.judge import check_answer
from lexidrill.core.models import (
    Direction,
    ListIndex,
    ListMeta,
    QuizMethod,
    WordEntry,
    WordList,
)
from lexidrill.core.scheduler import Question, ReviewResult, ReviewScheduler
from lexidrill.core.session import (
    Prompter,
    PromptSnapshot,
    SessionCancelled,
    SessionController,
    SessionResult,
)
from lexidrill.core.storage import GarbageReport, ListStore

__all__ = [
    # Models
    "Direction",
    "ListIndex",
    "ListMeta",
    "QuizMethod",
    "WordEntry",
    "WordList",
    # Storage
    "GarbageReport",
    "ListStore",
    # Errors
    "CollisionError",
    "DeserializationError",
    "IdUnderflowError",
    "ListNotFoundError",
    "MissingListFileError",
    "ParseError",
    "StoreError",
    # Review
    "check_answer",
    "Prompter",
    "PromptSnapshot",
    "Question",
    "ReviewResult",
    "ReviewScheduler",
    "SessionCancelled",
    "SessionController",
    "SessionResult",
]
