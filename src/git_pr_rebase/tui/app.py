"""Textual application for yes/no confirmation."""

from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, Footer, Static

from git_pr_rebase.tui.styles import CONFIRM_CSS


class ConfirmApp(App[bool]):
    """Asks a single yes/no question and exits with the answer."""

    TITLE = "git-pr-rebase"
    CSS = CONFIRM_CSS

    BINDINGS = [
        Binding("y", "answer(True)", "Yes", priority=True),
        Binding("n", "answer(False)", "No", priority=True),
        Binding("escape", "answer(False)", "Cancel", show=False, priority=True),
        Binding("q", "answer(False)", "Quit", show=False, priority=True),
        Binding("ctrl+c", "answer(False)", "Quit", show=False),
    ]

    def __init__(self, question: str, detail: Optional[str] = None) -> None:
        """Initialize the application.

        Args:
            question: Question shown to the operator
            detail: Optional explanatory line below the question
        """
        super().__init__()
        self.question = question
        self.detail = detail

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        with Container(id="confirm-container"):
            yield Static(self.question, id="confirm-question")
            if self.detail:
                yield Static(self.detail, id="confirm-detail")
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes", variant="primary", id="confirm-yes")
                yield Button("No", id="confirm-no")
        yield Footer()

    def on_mount(self) -> None:
        # Default to the non-destructive answer
        self.query_one("#confirm-no", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        self.exit(event.button.id == "confirm-yes")

    def action_answer(self, answer: bool) -> None:
        self.exit(answer)
