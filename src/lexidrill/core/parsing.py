"""Parser for the plain-text word list import format.

One entry per line::

    KEY<tab or '='>VALUE1<',' or '/'>VALUE2...

Example (nl -> en)::

    bank	sofa, bank
    huis=house/home
"""

import re

from lexidrill.core.errors import ParseError
from lexidrill.core.models import Direction, WordEntry

_KEY_SEPARATOR = re.compile(r"[\t=]")
_VALUE_SEPARATOR = re.compile(r"[,/]")


def _split_values(raw: str) -> list[str]:
    """Split a value field into trimmed, non-empty values."""
    values = (v.strip() for v in _VALUE_SEPARATOR.split(raw))
    return [v for v in values if v]


def parse_word_list(text: str, direction: Direction = Direction.TERM_TO_DEF) -> list[WordEntry]:
    """Parse import text into word entries.

    Repeated keys accumulate their values on the first occurrence of the key.
    Blank lines are skipped.

    Raises:
        ParseError: If a line has no key separator, an empty key or no values.
    """
    definitions: dict[str, list[str]] = {}

    for n, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue

        parts = _KEY_SEPARATOR.split(line)
        if len(parts) < 2:
            raise ParseError(n, "Term needs definition")

        key = parts[0].strip()
        if not key:
            raise ParseError(n, "Definition needs term")

        values = _split_values(parts[1])
        if not values:
            raise ParseError(n, "Term needs definition")

        definitions.setdefault(key, []).extend(values)

    return [
        WordEntry(terms=[term], definitions=values, direction=direction)
        for term, values in definitions.items()
    ]
