"""Exceptions raised by the list store and the import parser."""

from pathlib import Path


class StoreError(Exception):
    """Base class for errors reading or writing the list store."""


class IdUnderflowError(StoreError):
    """Raised for list ID 0. IDs are 1-indexed."""

    def __init__(self, list_id: int = 0):
        self.list_id = list_id
        super().__init__("Integer underflow. IDs are 1-indexed.")


class ListNotFoundError(StoreError):
    """Raised when no list exists for an ID."""

    def __init__(self, list_id: int, message: str | None = None):
        self.list_id = list_id
        super().__init__(message or f"Could not find that list by ID {list_id}")


class MissingListFileError(ListNotFoundError):
    """Raised when an index entry points at a list file that does not exist."""

    def __init__(self, list_id: int | None, path: Path):
        self.path = path
        label = f"List {list_id}" if list_id is not None else "This words list"
        super().__init__(list_id or 0, f"{label} does not exist on disk: {path}")


class ParseError(StoreError):
    """Raised when a line of import text cannot be parsed."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Couldn't parse line number {line_number}: {reason}")


class DeserializationError(StoreError):
    """Raised when the index or a list file cannot be decoded."""

    def __init__(self, path: Path, detail: str):
        self.path = path
        super().__init__(f"Could not read {path}: {detail}")


class CollisionError(StoreError):
    """Raised when a new list file would overwrite an existing one."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"A words list already exists at {path}")
