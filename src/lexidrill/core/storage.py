"""Storage layer for the list index and word list files (JSON)."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

from pydantic import ValidationError

from lexidrill.core.errors import (
    CollisionError,
    DeserializationError,
    IdUnderflowError,
    ListNotFoundError,
    MissingListFileError,
    StoreError,
)
from lexidrill.core.models import Direction, ListIndex, ListMeta, WordList
from lexidrill.core.parsing import parse_word_list

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"


def default_data_dir() -> Path:
    """Get the default store directory ($XDG_DATA_HOME/lexidrill)."""
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "lexidrill"


@dataclass
class GarbageReport:
    """What a garbage collection found (and removed unless it was a dry run)."""

    stale_entries: list[tuple[int, UUID]] = field(default_factory=list)
    orphan_files: list[Path] = field(default_factory=list)
    dry_run: bool = False

    @property
    def is_clean(self) -> bool:
        return not self.stale_entries and not self.orphan_files


class ListStore:
    """Manages the list index and one JSON file per word list.

    The index is loaded once on construction and only written by
    ``save_index()``. List files are named after the list's UUID, so they
    survive the index positions (IDs) shifting.
    """

    def __init__(self, data_dir: Path | None = None):
        if data_dir is None:
            data_dir = default_data_dir()

        self.data_dir = data_dir
        self.index_path = data_dir / INDEX_FILENAME
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.index = self._load_index()

    def _load_index(self) -> ListIndex:
        """Read the index file, treating a missing or empty file as an empty index."""
        if not self.index_path.exists():
            return ListIndex()

        try:
            raw = self.index_path.read_text()
            if not raw.strip():
                return ListIndex()
            return ListIndex.model_validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as e:
            raise DeserializationError(
                self.index_path,
                "There is an error in the index file which cannot be resolved.",
            ) from e

    def save_index(self) -> Path:
        """Rewrite the index file from the in-memory index."""
        with open(self.index_path, "w") as f:
            json.dump(self.index.model_dump(mode="json"), f, indent=2, default=str)
        logger.debug("Saved index with %d list(s) to %s", len(self.index.lists), self.index_path)
        return self.index_path

    # ------------------------------------------------------------------
    # Index access (IDs are 1-based positions)
    # ------------------------------------------------------------------

    def _position(self, list_id: int) -> int:
        if list_id <= 0:
            raise IdUnderflowError(list_id)
        if list_id > len(self.index.lists):
            raise ListNotFoundError(list_id)
        return list_id - 1

    def get(self, list_id: int) -> ListMeta:
        """Get list metadata by its 1-based ID."""
        return self.index.lists[self._position(list_id)]

    def remove(self, list_id: int) -> ListMeta:
        """Remove a list from the index. Lists after it move down one ID."""
        return self.index.lists.pop(self._position(list_id))

    def iter_lists(self, language: str | None = None) -> list[tuple[int, ListMeta]]:
        """Get ``(id, meta)`` pairs, optionally only lists using a language."""
        return [
            (i, meta)
            for i, meta in enumerate(self.index.lists, 1)
            if language is None or language in (meta.term_language, meta.definition_language)
        ]

    def group_by_folder(
        self, language: str | None = None
    ) -> dict[str | None, list[tuple[int, ListMeta]]]:
        """Group lists by folder. Folders are sorted, lists without one come first."""
        groups: dict[str | None, list[tuple[int, ListMeta]]] = {}
        for meta in self.index.lists:
            groups.setdefault(meta.folder, [])
        for list_id, meta in self.iter_lists(language):
            groups[meta.folder].append((list_id, meta))
        return dict(sorted(groups.items(), key=lambda item: (item[0] is not None, item[0] or "")))

    # ------------------------------------------------------------------
    # List files
    # ------------------------------------------------------------------

    def words_path(self, meta: ListMeta) -> Path:
        """Get the path of a list's backing file."""
        return self.data_dir / f"{meta.uuid}.json"

    def words_file_exists(self, meta: ListMeta, list_id: int | None = None) -> Path:
        """Get the path of a list's backing file, which must exist."""
        path = self.words_path(meta)
        if not path.is_file():
            raise MissingListFileError(list_id, path)
        return path

    def load_words(self, meta: ListMeta, list_id: int | None = None) -> WordList:
        """Load the words of a list."""
        path = self.words_file_exists(meta, list_id)
        try:
            return WordList.model_validate_json(path.read_text())
        except UnicodeDecodeError as e:
            raise DeserializationError(path, f"not valid UTF-8 ({e.reason})") from e
        except ValidationError as e:
            detail = f"invalid words list ({e.error_count()} error(s))"
            raise DeserializationError(path, detail) from e

    def save_words(self, meta: ListMeta, words: WordList) -> Path:
        """Rewrite a list's backing file."""
        path = self.words_path(meta)
        with open(path, "w") as f:
            json.dump(words.model_dump(mode="json"), f, indent=2, default=str)
        logger.debug("Saved %d word(s) of '%s' to %s", len(words.words), meta.name, path)
        return path

    def import_list(
        self,
        name: str,
        raw_text: str,
        term_language: str | None = None,
        definition_language: str | None = None,
        folder: str | None = None,
        direction: Direction = Direction.TERM_TO_DEF,
    ) -> int:
        """Parse import text into a new list and return its ID.

        The list file is created exclusively; the index is only changed in
        memory and has to be written with ``save_index()``.
        """
        words = WordList(words=parse_word_list(raw_text, direction))
        meta = ListMeta(
            name=name,
            term_language=term_language,
            definition_language=definition_language,
            folder=folder,
        )
        meta.last_modified = meta.created_at

        path = self.words_path(meta)
        try:
            with open(path, "x") as f:
                json.dump(words.model_dump(mode="json"), f, indent=2, default=str)
        except FileExistsError as e:
            raise CollisionError(path) from e

        self.index.lists.append(meta)
        list_id = len(self.index.lists)
        logger.info("Imported '%s' (%d word(s)) as list %d", name, len(words.words), list_id)
        return list_id

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def remove_lists(self, ids: list[int], force: bool = False) -> list[ListMeta]:
        """Remove several lists and their files.

        IDs are handled highest first so earlier removals don't shift the
        remaining targets. Without ``force`` the first failure (unknown ID or
        missing file) stops the removal; with ``force`` it is logged and skipped.
        """
        removed: list[ListMeta] = []
        for list_id in sorted(set(ids), reverse=True):
            try:
                meta = self.get(list_id)
                path = self.words_file_exists(meta, list_id)
            except StoreError as e:
                if not force:
                    raise
                logger.warning("Skipping list %d: %s", list_id, e)
                continue

            removed.append(self.remove(list_id))
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Could not remove file of list %d (ignored): %s", list_id, e)
        return removed

    def garbage_collect(self, dry_run: bool = False) -> GarbageReport:
        """Drop index entries without a file and files without an index entry."""
        report = GarbageReport(dry_run=dry_run)
        referenced: set[Path] = set()

        for list_id, meta in self.iter_lists():
            path = self.words_path(meta)
            if path.is_file():
                referenced.add(path)
            else:
                report.stale_entries.append((list_id, meta.uuid))

        report.orphan_files = sorted(
            path
            for path in self.data_dir.glob("*.json")
            if path.is_file() and path != self.index_path and path not in referenced
        )

        if dry_run:
            return report

        for list_id, uuid in reversed(report.stale_entries):
            logger.info("Removing %s from index (id: %d) (file doesn't exist)", uuid, list_id)
            self.remove(list_id)
        for path in report.orphan_files:
            logger.info("Removing %s", path)
            path.unlink()
        return report
