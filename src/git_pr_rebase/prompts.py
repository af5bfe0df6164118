"""Yes/no confirmation prompts."""

import os
from typing import Mapping, Optional, Protocol


class Prompter(Protocol):
    """Asks the operator a yes/no question."""

    def confirm(self, question: str, detail: Optional[str] = None) -> bool: ...


class ConsolePrompter:
    """Plain text prompt on stdin/stdout."""

    def confirm(self, question: str, detail: Optional[str] = None) -> bool:
        if detail:
            print(detail)
        while True:
            choice = input(f"{question} [y/N]: ").lower().strip()
            if choice in ("y", "yes"):
                return True
            if choice in ("", "n", "no"):
                return False
            print("Please enter y (yes) or n (no)")


class TextualPrompter:
    """Prompt rendered as a small textual application."""

    def confirm(self, question: str, detail: Optional[str] = None) -> bool:
        from git_pr_rebase.tui.app import ConfirmApp

        return bool(ConfirmApp(question, detail=detail).run())


def is_interactive(environ: Optional[Mapping[str, str]] = None) -> bool:
    """False when running under CI, where nobody can answer a prompt."""
    env = environ if environ is not None else os.environ
    return env.get("CI") is None
