"""Terminal front end for review sessions."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from lexidrill.core.models import QuizMethod
from lexidrill.core.session import PromptSnapshot

QUIT_COMMANDS = {":q", ":quit"}


def _language(code: str | None) -> str:
    return code if code else "not set"


class ConsolePrompter:
    """Renders questions with rich and reads answers from stdin.

    Ctrl-C, Ctrl-D or typing ``:q`` quits the session.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._choices: list[str] = []

    def render_prompt(self, snapshot: PromptSnapshot) -> None:
        question = snapshot.question
        self._choices = snapshot.choices

        if snapshot.last_result is not None:
            self.console.print(self._feedback(snapshot))

        header = (
            f"[bold]{snapshot.frontier}[/bold] / {snapshot.total_words}\n"
            f"Direction: [bold]{question.direction.label}[/bold]\n"
            f"Progress: {'*' * question.progress or '-'}"
        )
        body = f"{header}\n\n[bold cyan]{escape(', '.join(question.prompt))}[/bold cyan]"
        body += f" [dim]({_language(snapshot.prompt_language)})[/dim]"

        if snapshot.method == QuizMethod.MULTIPLE_CHOICE:
            body += "\n"
            for n, choice in enumerate(snapshot.choices, 1):
                body += f"\n  [yellow]{n}[/yellow] {escape(choice)}"

        self.console.print(Panel(body, title=escape(snapshot.list_name), border_style="blue"))

    def _feedback(self, snapshot: PromptSnapshot) -> Text:
        last = snapshot.last_result
        asked = ", ".join(last.question.prompt)
        expected = ", ".join(last.question.answers)
        if last.correct:
            text = Text("Correct! ", style="green")
            text.append(f"{asked} -> {expected}")
            if last.retired:
                text.append("  (mastered)", style="dim")
            return text
        text = Text("Wrong! ", style="red")
        text.append(f"{asked} -> {expected}. You guessed ")
        text.append(last.guess, style="bold red")
        return text

    def await_answer(self) -> str | None:
        try:
            answer = self.console.input("[bold]> [/bold]")
        except (KeyboardInterrupt, EOFError):
            return None

        if answer.strip() in QUIT_COMMANDS:
            return None

        # Multiple choice accepts the number of an option
        if self._choices and answer.strip().isdigit():
            n = int(answer.strip())
            if 1 <= n <= len(self._choices):
                return self._choices[n - 1]
        return answer
