"""Tests for review sessions."""

import random
import tempfile
from pathlib import Path

import pytest
from lexidrill.core.errors import IdUnderflowError, ListNotFoundError, MissingListFileError
from lexidrill.core.judge import check_answer
from lexidrill.core.models import Direction, QuizMethod
from lexidrill.core.session import PromptSnapshot, SessionCancelled, SessionController
from lexidrill.core.storage import ListStore

WORDS = "\n".join(f"term{i}\tdef{i}" for i in range(12))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    """Create a ListStore with one 12 word list and one empty list."""
    store = ListStore(temp_dir / "lexidrill")
    store.import_list("numbers", WORDS, "xx", "en")
    store.import_list("empty", "")
    store.save_index()
    return store


class ScriptedPrompter:
    """Answers questions with a function of the snapshot; None quits."""

    def __init__(self, answer=None, stop_after: int | None = None):
        self.answer = answer or (lambda snapshot: ", ".join(snapshot.question.answers))
        self.stop_after = stop_after
        self.snapshots: list[PromptSnapshot] = []

    def render_prompt(self, snapshot: PromptSnapshot) -> None:
        self.snapshots.append(snapshot)

    def await_answer(self) -> str | None:
        if self.stop_after is not None and len(self.snapshots) > self.stop_after:
            return None
        return self.answer(self.snapshots[-1])


def _run(store, prompter, **kwargs):
    controller = SessionController(store, prompter, rng=random.Random(0))
    return controller.run(1, **kwargs)


class TestRun:
    """Tests for complete sessions."""

    def test_all_correct(self, store):
        prompter = ScriptedPrompter()
        result = _run(store, prompter)

        assert result.completed
        assert result.asked == 36
        assert result.correct == 36
        assert result.incorrect == 0
        assert result.frontier == 12

        reloaded = ListStore(store.data_dir)
        meta = reloaded.get(1)
        words = reloaded.load_words(meta)
        assert [w.times_answered_correctly for w in words.words] == [3] * 12
        assert meta.progress is None
        assert meta.shuffle_map is None

    def test_statistics_accumulate_across_sessions(self, store):
        _run(store, ScriptedPrompter())
        _run(store, ScriptedPrompter())
        words = ListStore(store.data_dir).load_words(store.get(1))
        assert [w.times_answered_correctly for w in words.words] == [6] * 12

    def test_wrong_answers(self, store):
        prompter = ScriptedPrompter(
            answer=lambda s: "nope" if len(prompter.snapshots) % 3 == 0 else s.question.answers[0]
        )
        result = _run(store, prompter)
        assert result.completed
        assert result.correct == 36
        assert result.incorrect == result.asked - 36

    def test_feedback_in_snapshot(self, store):
        prompter = ScriptedPrompter(answer=lambda s: "nope")
        prompter.stop_after = 2
        with pytest.raises(SessionCancelled):
            _run(store, prompter)
        first, second = prompter.snapshots[:2]
        assert first.last_result is None
        assert second.last_result is not None
        assert not second.last_result.correct
        assert second.last_result.guess == "nope"

    def test_languages_follow_direction(self, store):
        prompter = ScriptedPrompter()
        _run(store, prompter, direction=Direction.DEF_TO_TERM)
        snapshot = prompter.snapshots[0]
        assert snapshot.question.prompt == ["def0"]
        assert snapshot.prompt_language == "en"
        assert snapshot.answer_language == "xx"

    def test_empty_list(self, store):
        prompter = ScriptedPrompter()
        result = SessionController(store, prompter).run(2)
        assert result.completed
        assert result.total_words == 0
        assert prompter.snapshots == []

    def test_bad_ids(self, store):
        controller = SessionController(store, ScriptedPrompter())
        with pytest.raises(IdUnderflowError):
            controller.run(0)
        with pytest.raises(ListNotFoundError):
            controller.run(3)

    def test_missing_file_reports_id(self, store):
        store.words_path(store.get(1)).unlink()
        controller = SessionController(store, ScriptedPrompter())
        with pytest.raises(MissingListFileError) as exc_info:
            controller.run(1)
        assert exc_info.value.list_id == 1


class TestMultipleChoice:
    """Tests for multiple choice sessions."""

    def test_choices(self, store):
        prompter = ScriptedPrompter(answer=lambda s: s.question.answers[0])
        result = _run(store, prompter, method=QuizMethod.MULTIPLE_CHOICE)
        assert result.completed
        for snapshot in prompter.snapshots:
            assert len(snapshot.choices) == 4
            assert len(set(snapshot.choices)) == 4
            assert ", ".join(snapshot.question.answers) in snapshot.choices
            assert all(c.startswith("def") for c in snapshot.choices)

    def test_exact_match_required(self, store):
        prompter = ScriptedPrompter(answer=lambda s: s.question.answers[0].upper())
        prompter.stop_after = 20
        with pytest.raises(SessionCancelled) as exc_info:
            _run(store, prompter, method=QuizMethod.MULTIPLE_CHOICE)
        assert exc_info.value.result.correct == 0

    def test_only_one_choice_is_right(self, store):
        store.import_list("pets", "kat\tcat, kitty\npoes\tcat\nhond\tdog\nvis\tfish")
        prompter = ScriptedPrompter()
        controller = SessionController(store, prompter, rng=random.Random(0))
        result = controller.run(3, method=QuizMethod.MULTIPLE_CHOICE)
        assert result.completed
        for snapshot in prompter.snapshots:
            answers = snapshot.question.answers
            right = [c for c in snapshot.choices if check_answer(snapshot.method, c, answers)]
            assert right == [", ".join(answers)]
        kat = next(s for s in prompter.snapshots if s.question.word_index == 0)
        assert "cat" not in kat.choices


class TestCancel:
    """Tests for quitting and resuming."""

    def test_cancel_saves_progress(self, store):
        # 20 questions answer every word twice, the next 3 retire words 0, 1 and 2
        prompter = ScriptedPrompter(stop_after=23)
        with pytest.raises(SessionCancelled) as exc_info:
            _run(store, prompter)

        result = exc_info.value.result
        assert not result.completed
        assert result.frontier == 3
        assert result.asked == 23

        reloaded = ListStore(store.data_dir)
        meta = reloaded.get(1)
        assert meta.progress == 3
        assert meta.shuffle_map is None
        words = reloaded.load_words(meta)
        # words 10 and 11 joined the rotation but were never asked
        assert [w.times_answered_correctly for w in words.words] == [3, 3, 3] + [2] * 7 + [0, 0]

    def test_resume_skips_retired_words(self, store):
        with pytest.raises(SessionCancelled):
            _run(store, ScriptedPrompter(stop_after=23), shuffle=True)
        saved = ListStore(store.data_dir).get(1)
        order = [saved.shuffle_map[i] for i in range(12)]
        retired = set(order[:3])

        prompter = ScriptedPrompter()
        controller = SessionController(ListStore(store.data_dir), prompter)
        result = controller.run(1)

        assert result.completed
        asked = {s.question.word_index for s in prompter.snapshots}
        assert asked == set(range(12)) - retired
        assert prompter.snapshots[0].question.word_index == order[3]
        assert prompter.snapshots[0].frontier == 3

    def test_resume_after_out_of_order_retirement(self, store):
        # word 0 is answered wrong first, so word 1 retires before it
        first = ScriptedPrompter(stop_after=22)
        first.answer = lambda snapshot: (
            "wrong" if len(first.snapshots) == 1 else ", ".join(snapshot.question.answers)
        )
        with pytest.raises(SessionCancelled) as exc_info:
            _run(store, first)
        assert exc_info.value.result.frontier == 1

        saved = ListStore(store.data_dir).get(1)
        assert saved.progress == 1
        assert saved.shuffle_map[0] == 1

        prompter = ScriptedPrompter()
        controller = SessionController(ListStore(store.data_dir), prompter)
        result = controller.run(1)

        assert result.completed
        asked = {s.question.word_index for s in prompter.snapshots}
        assert asked == set(range(12)) - {1}
        words = ListStore(store.data_dir).load_words(saved)
        assert all(w.times_answered_correctly >= 3 for w in words.words)

    def test_reset_starts_over(self, store):
        with pytest.raises(SessionCancelled):
            _run(store, ScriptedPrompter(stop_after=23))

        prompter = ScriptedPrompter()
        controller = SessionController(ListStore(store.data_dir), prompter)
        result = controller.run(1, reset=True)
        assert result.asked == 36
        assert prompter.snapshots[0].frontier == 0

    def test_list_written_before_index(self, store, monkeypatch):
        calls = []
        original_words = store.save_words
        original_index = store.save_index

        def save_words(*args):
            calls.append("words")
            return original_words(*args)

        def save_index():
            calls.append("index")
            return original_index()

        monkeypatch.setattr(store, "save_words", save_words)
        monkeypatch.setattr(store, "save_index", save_index)

        with pytest.raises(SessionCancelled):
            _run(store, ScriptedPrompter(stop_after=0))
        assert calls == ["words", "index"]

    def test_prompter_error_still_saves(self, store):
        class Broken(ScriptedPrompter):
            def await_answer(self):
                if len(self.snapshots) > 21:
                    raise OSError("terminal went away")
                return super().await_answer()

        with pytest.raises(OSError):
            _run(store, Broken())
        meta = ListStore(store.data_dir).get(1)
        assert meta.progress == 1
