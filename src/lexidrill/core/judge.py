"""Deciding whether an answer counts as correct."""

import re
from collections.abc import Sequence

from lexidrill.core.models import QuizMethod

_PARENTHESIZED = re.compile(r"\(.*\)")


def _matches(method: QuizMethod, answer: str, candidate: str) -> bool:
    if method == QuizMethod.MULTIPLE_CHOICE:
        return answer == candidate

    answer = answer.strip().casefold()
    candidate = candidate.strip()
    without_parens = _PARENTHESIZED.sub("", candidate).strip()
    squashed = re.sub(r"[() ]", "", candidate)
    return answer in (
        candidate.casefold(),
        without_parens.casefold(),
        squashed.casefold(),
    )


def check_answer(method: QuizMethod, answer: str, acceptable: Sequence[str]) -> bool:
    """Check an answer against the acceptable answers of a word.

    The answer is correct if it matches one of the acceptable answers, or all
    of them joined with ``", "``. With ``WRITE`` the comparison ignores case,
    surrounding whitespace and an optional parenthesized part, so ``Such``
    matches ``Such (optional)``. ``MULTIPLE_CHOICE`` only accepts an exact match.

    An empty list of acceptable answers never matches, not even an empty answer.
    """
    if not acceptable:
        return False

    candidates = [*acceptable, ", ".join(acceptable)]
    return any(_matches(method, answer, candidate) for candidate in candidates)
