"""Tests for lexidrill models."""

import pytest
from lexidrill.core.models import Direction, ListIndex, ListMeta, QuizMethod, WordEntry, WordList
from pydantic import ValidationError


class TestDirection:
    """Tests for merging a session direction with a word direction."""

    def test_auto_yields_other(self):
        for d in Direction:
            assert Direction.AUTO.merge(d) == d
            assert d.merge(Direction.AUTO) == d

    def test_both_wins(self):
        for d in (Direction.TERM_TO_DEF, Direction.DEF_TO_TERM, Direction.BOTH):
            assert Direction.BOTH.merge(d) == Direction.BOTH
            assert d.merge(Direction.BOTH) == Direction.BOTH

    def test_fixed_directions(self):
        assert Direction.TERM_TO_DEF.merge(Direction.TERM_TO_DEF) == Direction.TERM_TO_DEF
        assert Direction.TERM_TO_DEF.merge(Direction.DEF_TO_TERM) == Direction.DEF_TO_TERM
        assert Direction.DEF_TO_TERM.merge(Direction.TERM_TO_DEF) == Direction.DEF_TO_TERM
        assert Direction.DEF_TO_TERM.merge(Direction.DEF_TO_TERM) == Direction.DEF_TO_TERM

    def test_and_operator(self):
        assert (Direction.AUTO & Direction.DEF_TO_TERM) == Direction.DEF_TO_TERM

    def test_values_are_strings(self):
        assert Direction("term-to-def") == Direction.TERM_TO_DEF
        assert QuizMethod("multiple-choice") == QuizMethod.MULTIPLE_CHOICE
        assert Direction.DEF_TO_TERM.label == "definition -> term"


class TestWordEntry:
    """Tests for WordEntry."""

    def test_defaults(self):
        entry = WordEntry(terms=["huis"], definitions=["house"])
        assert entry.direction == Direction.TERM_TO_DEF
        assert entry.times_answered_correctly == 0

    def test_negative_counter_rejected(self):
        with pytest.raises(ValidationError):
            WordEntry(terms=["a"], definitions=["b"], times_answered_correctly=-1)


class TestListMeta:
    """Tests for ListMeta."""

    def test_uuid_generated(self):
        a = ListMeta(name="a")
        b = ListMeta(name="b")
        assert a.uuid != b.uuid
        assert a.progress is None
        assert a.shuffle_map is None

    def test_shuffle_map_roundtrip(self):
        """JSON object keys come back as ints."""
        meta = ListMeta(name="a", progress=1, shuffle_map={0: 2, 1: 0, 2: 1})
        loaded = ListMeta.model_validate_json(meta.model_dump_json())
        assert loaded.shuffle_map == {0: 2, 1: 0, 2: 1}
        assert loaded.uuid == meta.uuid
        assert loaded.created_at == meta.created_at

    def test_clear_progress(self):
        meta = ListMeta(name="a", progress=3, shuffle_map={0: 0})
        meta.clear_progress()
        assert meta.progress is None
        assert meta.shuffle_map is None

    def test_touch(self):
        meta = ListMeta(name="a")
        before = meta.last_modified
        meta.touch()
        assert meta.last_modified >= before


def test_empty_containers():
    assert ListIndex().lists == []
    assert WordList().words == []
