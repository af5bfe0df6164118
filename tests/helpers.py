"""Test helpers for git-pr-rebase."""

import subprocess
from typing import List, Optional, Set

from git_pr_rebase.result import Err, GitOperationError, Ok


class FakeGitOps:
    """In-memory stand-in for GitOps that tracks checkout and rebase state."""

    def __init__(
        self,
        current: str = "main",
        dirty: bool = False,
        rebase_status: int = 0,
        rebase_stdout: str = "",
        rebase_stderr: str = "",
        fail_on: Optional[Set[str]] = None,
    ) -> None:
        self.checked_out = current
        self.dirty = dirty
        self.rebase_status = rebase_status
        self.rebase_stdout = rebase_stdout
        self.rebase_stderr = rebase_stderr
        self.fail_on = fail_on or set()
        self.rebase_in_progress = False
        self.fetch_count = 0
        self.calls: List[List[str]] = []
        self.secret: Optional[str] = None

    def redact(self, text: str) -> str:
        return text.replace(self.secret, "<TOKEN>") if self.secret else text

    def has_local_changes(self) -> bool:
        return self.dirty

    def get_current_branch_or_revision(self) -> str:
        return self.checked_out

    def run(self, args: List[str]):
        self.calls.append(list(args))
        step = args[0]
        if step == "fetch":
            self.fetch_count += 1
            step = "fetch-head" if self.fetch_count == 1 else "fetch-base"
        if step in self.fail_on:
            return Err(
                GitOperationError(
                    operation=args[0],
                    message="Git command exited with a non-zero status",
                    command="git " + " ".join(args),
                    returncode=1,
                    stderr=f"{args[0]} failed",
                )
            )
        if args[0] == "checkout":
            self.checked_out = "FETCH_HEAD (detached)"
        return Ok("")

    def run_git_command(
        self, args: List[str], quiet: bool = False
    ) -> subprocess.CompletedProcess:
        self.calls.append(list(args))
        returncode = 0
        stdout = stderr = ""
        if args == ["rebase", "FETCH_HEAD"]:
            returncode = self.rebase_status
            stdout, stderr = self.rebase_stdout, self.rebase_stderr
            self.rebase_in_progress = returncode != 0
        elif args == ["rebase", "--abort"]:
            returncode = 0 if self.rebase_in_progress else 128
            self.rebase_in_progress = False
        elif args[0] == "checkout":
            self.checked_out = args[-1]
        return subprocess.CompletedProcess(
            args=["git"] + args, returncode=returncode, stdout=stdout, stderr=stderr
        )

    def count(self, *args: str) -> int:
        return sum(1 for call in self.calls if call == list(args))

    def mutating_calls(self) -> List[List[str]]:
        return [
            call
            for call in self.calls
            if call[0] in ("fetch", "checkout", "rebase", "push", "reset")
        ]


