"""Main CLI entry point for lexidrill."""

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lexidrill.cli.helpers import EditorError, console, edit_words, err_console, get_store
from lexidrill.cli.prompter import ConsolePrompter
from lexidrill.core.errors import StoreError
from lexidrill.core.models import Direction, ListMeta, QuizMethod, WordList
from lexidrill.core.session import SessionCancelled, SessionController

load_dotenv()

app = typer.Typer(
    name="lexidrill",
    help="Learn vocabulary lists from the terminal.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Learn vocabulary lists from the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(error: Exception) -> typer.Exit:
    """Report an error and build the exit to raise."""
    rprint(f"[red]{escape(str(error))}[/red]")
    return typer.Exit(1)


# ============================================================================
# IMPORT / NEW commands
# ============================================================================


@app.command("import")
def import_list(
    filename: Path = typer.Argument(..., help="Text file with one 'term<TAB>definition' per line"),
    term_lang: str | None = typer.Argument(None, help="Language of the terms"),
    def_lang: str | None = typer.Argument(None, help="Language of the definitions"),
    folder: str | None = typer.Option(None, "--dir", "-d", help="Folder to put the list in"),
    direction: Direction = typer.Option(
        Direction.TERM_TO_DEF,
        "--direction",
        help="Default direction of every word",
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="List name (default: file name)"),
) -> None:
    """Import a words list from a text file."""
    store = get_store()

    try:
        data = filename.read_text()
    except OSError as e:
        raise _fail(e)

    name = name or filename.stem or typer.prompt("What name do you want to give the words list?")

    try:
        list_id = store.import_list(name, data, term_lang, def_lang, folder, direction)
    except StoreError as e:
        rprint(f"[dim]while trying to import {escape(str(filename))}[/dim]")
        raise _fail(e)
    store.save_index()

    rprint(
        f"[green]Successfully imported words list[/green] `{escape(name)}` "
        f"from `{escape(str(filename))}` with ID {list_id}."
    )


@app.command()
def new(
    name: str = typer.Argument(..., help="Name of the list"),
    term_lang: str = typer.Argument(..., help="Language of the terms"),
    def_lang: str = typer.Argument(..., help="Language of the definitions"),
    folder: str | None = typer.Option(None, "--dir", "-d", help="Folder to put the list in"),
    direction: Direction = typer.Option(
        Direction.TERM_TO_DEF,
        "--direction",
        help="Default direction of every word",
    ),
) -> None:
    """Create a new words list in $EDITOR."""
    store = get_store()
    try:
        data = edit_words()
    except EditorError as e:
        rprint("[dim]Try setting $EDITOR correctly (or installing vim)[/dim]")
        raise _fail(e)

    try:
        list_id = store.import_list(name, data, term_lang, def_lang, folder, direction)
    except StoreError as e:
        raise _fail(e)
    store.save_index()
    rprint(f"[green]Successfully created list {list_id}.[/green]")


# ============================================================================
# LS / SHOW commands
# ============================================================================


@app.command("ls")
def list_lists(
    language: str | None = typer.Argument(None, help="Only show lists using this language"),
) -> None:
    """List all words lists, grouped by folder."""
    store = get_store()
    groups = store.group_by_folder(language)

    if not groups:
        rprint("[dim]No lists...[/dim]")
        return

    for folder, lists in groups.items():
        rprint(f"[bold]{escape(folder) if folder else 'No folder'}:[/bold]")
        if not lists:
            rprint("  [dim]No lists...[/dim]")
        for list_id, meta in lists:
            rprint(f"  {list_id}. {escape(meta.name)}")


def _meta_panel(meta: ListMeta, words: WordList) -> Panel:
    lines = []
    if meta.term_language:
        lines.append(f"Terms: {meta.term_language}")
    if meta.definition_language:
        lines.append(f"Definitions: {meta.definition_language}")
    lines.append(f"Created at: {meta.created_at:%Y-%m-%d %H:%M}")
    lines.append(f"Last modified at: {meta.last_modified:%Y-%m-%d %H:%M}")
    if meta.folder:
        lines.append(f"Folder: {meta.folder}")
    if meta.progress is not None:
        lines.append(f"Resume at: {meta.progress}/{len(words.words)}")
    lines.append(f"[dim]UUID: {meta.uuid}[/dim]")
    return Panel("\n".join(lines), title=escape(meta.name), border_style="blue")


def _words_table(words: WordList) -> Table:
    table = Table(show_header=True)
    table.add_column("Term", style="cyan")
    table.add_column("Definitions")
    table.add_column("Direction", style="dim")
    table.add_column("Times answered correctly", justify="right", style="green")
    for entry in words.words:
        table.add_row(
            escape(", ".join(entry.terms)),
            escape(", ".join(entry.definitions)),
            entry.direction.label,
            str(entry.times_answered_correctly),
        )
    return table


def _porcelain(meta: ListMeta, words: WordList) -> str:
    lines = [
        f"name\t{meta.name}",
        f"term_lang\t{meta.term_language or 'null'}",
        f"def_lang\t{meta.definition_language or 'null'}",
        f"created_at\t{meta.created_at.isoformat()}",
        f"last_modified\t{meta.last_modified.isoformat()}",
        f"folder\t{meta.folder or 'null'}",
        f"uuid\t{meta.uuid}",
        "",
    ]
    for entry in words.words:
        lines.append(
            f"{','.join(entry.terms)}\t{','.join(entry.definitions)}"
            f"\t{entry.direction}\t{entry.times_answered_correctly}"
        )
    return "\n".join(lines)


@app.command()
def show(
    ids: list[int] = typer.Argument(..., help="List IDs"),
    porcelain: bool = typer.Option(
        False,
        "--porcelain",
        "-p",
        help="Tab-separated output for scripts",
    ),
) -> None:
    """Show all information about words lists."""
    store = get_store()

    for list_id in ids:
        try:
            meta = store.get(list_id)
            words = store.load_words(meta, list_id)
        except StoreError as e:
            raise _fail(e)

        if porcelain:
            typer.echo(_porcelain(meta, words))
        else:
            console.print(_meta_panel(meta, words))
            console.print(_words_table(words))


# ============================================================================
# RM / GC commands
# ============================================================================


@app.command()
def rm(
    ids: list[int] = typer.Argument(..., help="List IDs to delete"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip lists that can't be removed instead of stopping",
    ),
) -> None:
    """Delete words lists. IDs of later lists shift down."""
    store = get_store()

    try:
        removed = store.remove_lists(ids, force=force)
    except StoreError as e:
        raise _fail(e)
    store.save_index()

    for meta in removed:
        rprint(f"[green]Removed[/green] {escape(meta.name)}")


@app.command()
def gc(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Only report what would be removed",
    ),
) -> None:
    """Remove index entries without a list file and list files not in the index."""
    store = get_store()
    report = store.garbage_collect(dry_run=dry_run)

    if report.is_clean:
        rprint("[green]Nothing to clean up.[/green]")
        return

    verb = "Would remove" if dry_run else "Removed"
    for list_id, uuid in report.stale_entries:
        rprint(f"{verb} {uuid} from index (id: {list_id}) (file doesn't exist)")
    for path in report.orphan_files:
        rprint(f"{verb} {escape(str(path))}")

    if not dry_run:
        store.save_index()


# ============================================================================
# TRY command
# ============================================================================


@app.command("try")
def try_list(
    list_id: int = typer.Argument(..., help="List ID"),
    method: QuizMethod = typer.Argument(QuizMethod.WRITE, help="How to answer"),
    direction: Direction = typer.Option(
        Direction.AUTO,
        "--direction",
        "-d",
        help="Which side to ask (auto uses each word's own direction)",
    ),
    shuffle: bool = typer.Option(False, "--shuffle", "-s", help="Ask the words in random order"),
    reset: bool = typer.Option(False, "--reset", "-r", help="Start over instead of resuming"),
) -> None:
    """Learn a words list until every word is mastered."""
    store = get_store()
    controller = SessionController(store, ConsolePrompter(console))

    rprint("[dim]Type :q or press Ctrl-D to stop. Progress is saved.[/dim]")
    try:
        result = controller.run(list_id, method, direction, shuffle=shuffle, reset=reset)
    except SessionCancelled as e:
        r = e.result
        rprint(
            f"\n[yellow]Session stopped at {r.frontier}/{r.total_words}.[/yellow] "
            f"Run [bold]lexidrill try {list_id}[/bold] to continue."
        )
        return
    except StoreError as e:
        raise _fail(e)

    if result.total_words == 0:
        rprint("[dim]This list has no words.[/dim]")
        return

    rprint("\n[bold green]List mastered![/bold green]")
    rprint(f"{result.correct} correct, {result.incorrect} wrong out of {result.asked} questions.")


if __name__ == "__main__":
    app()
