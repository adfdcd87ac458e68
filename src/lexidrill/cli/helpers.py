"""Shared CLI helpers used by the commands."""

import os
import shlex
import subprocess
import sys
import tempfile
from pathlib import Path

from rich.console import Console

from lexidrill.core.storage import ListStore, default_data_dir

console = Console()
err_console = Console(stderr=True)

# Global store instance (initialized lazily)
_store: ListStore | None = None

_DETACHING_EDITORS = {"code", "code-insiders", "subl", "zed"}


def get_store() -> ListStore:
    """Get or create the store instance."""
    global _store
    if _store is None:
        raw = os.environ.get("LEXIDRILL_DATA_DIR")
        data_dir = Path(raw) if raw else default_data_dir()
        _store = ListStore(data_dir)
    return _store


class EditorError(Exception):
    """Raised when the words editor can't be started or fails."""

    def __init__(self, editor: str, detail: str, from_env: bool):
        self.editor = editor
        reason = "$EDITOR was set" if from_env else "$EDITOR wasn't set, so the default was used"
        super().__init__(f"Could not run editor '{editor}' ({reason}): {detail}")


def _default_editor() -> str:
    if sys.platform == "win32":
        return "notepad"
    if sys.platform == "darwin":
        return "open -W -n -e"
    return "vim"


def resolve_editor() -> tuple[list[str], bool]:
    """Get the editor command and whether it came from $EDITOR/$VISUAL."""
    raw = os.environ.get("EDITOR") or os.environ.get("VISUAL")
    from_env = raw is not None
    cmd = shlex.split(raw or _default_editor())
    # GUI editors detach unless told to wait
    if cmd and cmd[0] in _DETACHING_EDITORS and {"-w", "--wait"}.isdisjoint(cmd):
        cmd.append("--wait")
    return cmd, from_env


def edit_words(initial: str = "") -> str:
    """Let the user type a words list in their editor and return the text."""
    cmd, from_env = resolve_editor()
    editor = " ".join(cmd)

    with tempfile.NamedTemporaryFile(mode="w", suffix=".tsv", delete=False) as f:
        f.write(initial)
        temp_path = Path(f.name)

    try:
        subprocess.run([*cmd, str(temp_path)], check=True)
        return temp_path.read_text()
    except FileNotFoundError as e:
        raise EditorError(editor, "command not found", from_env) from e
    except subprocess.CalledProcessError as e:
        raise EditorError(editor, f"exited with status {e.returncode}", from_env) from e
    finally:
        temp_path.unlink(missing_ok=True)
