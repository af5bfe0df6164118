"""Git operations module for repository queries and commands."""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import quote

from git_pr_rebase.exceptions import RepositoryStateError, handle_unexpected_error
from git_pr_rebase.result import Err, GitOperationError, GitResult, Ok

logger = logging.getLogger(__name__)

REDACTED = "<TOKEN>"


class GitOps:
    """Runs git commands against a single working tree."""

    def __init__(
        self, repo_path: Optional[Path] = None, secret: Optional[str] = None
    ) -> None:
        """Initialize GitOps with optional repository path.

        Args:
            repo_path: Path to git repository. Defaults to current directory.
            secret: Value to redact from logged commands and error messages,
                typically the GitHub token embedded in remote URLs.
        """
        self.repo_path = repo_path if repo_path is not None else Path.cwd()
        self.secret = secret

    def redact(self, text: str) -> str:
        """Replace the configured secret, raw or URL-encoded, in text."""
        if not self.secret or not text:
            return text
        text = text.replace(self.secret, REDACTED)
        return text.replace(quote(self.secret, safe=""), REDACTED)

    def _format_command(self, args: Sequence[str]) -> str:
        return self.redact(" ".join(["git", *args]))

    def _run_git_command(self, *args: str) -> tuple[bool, str]:
        """Run a git command and return success status and output.

        Args:
            *args: Git command arguments

        Returns:
            Tuple of (success, output/error_message)
        """
        result = self.run_git_command(list(args))
        return (
            result.returncode == 0,
            result.stdout.strip() or result.stderr.strip(),
        )

    def is_git_available(self) -> bool:
        """Check that the git executable can be run."""
        success, _ = self._run_git_command("--version")
        return success

    def is_git_repo(self) -> bool:
        """Check if current directory is inside a git repository.

        Returns:
            True if in a git repository, False otherwise
        """
        success, _ = self._run_git_command("rev-parse", "--git-dir")
        return success

    def has_local_changes(self) -> bool:
        """Check whether tracked files have uncommitted changes.

        Untracked files are ignored; they survive checkouts and resets.
        """
        success, output = self._run_git_command(
            "status", "--porcelain", "--untracked-files=no"
        )
        if not success:
            # Unknown state must block the rebase
            return True
        return bool(output)

    def get_current_branch_or_revision(self) -> str:
        """Get the checked out branch name, or the commit hash when detached."""
        success, output = self._run_git_command("symbolic-ref", "--short", "HEAD")
        if success and output:
            return output
        result = self.run(["rev-parse", "HEAD"])
        if result.is_err():
            raise RepositoryStateError(
                "Could not determine the current branch or revision",
                current_state=str(result.unwrap_err()),
                recovery_suggestion="Make sure the repository has at least one commit",
            )
        return result.unwrap()

    def get_remote_url(self, remote: str = "origin") -> Optional[str]:
        """Get the fetch URL of a remote, or None if it is not configured."""
        success, output = self._run_git_command("remote", "get-url", remote)
        return output if success and output else None

    def run(self, args: list[str]) -> GitResult[str]:
        """Run a git command that is expected to succeed.

        Args:
            args: Git command arguments (without 'git')

        Returns:
            Ok with stripped stdout, or Err describing the failure
        """
        result = self.run_git_command(args)
        if result.returncode == 0:
            return Ok(result.stdout.strip())

        command = self._format_command(args)
        return Err(
            GitOperationError(
                operation=args[0] if args else "git",
                message="Git command exited with a non-zero status",
                command=command,
                returncode=result.returncode,
                stderr=self.redact(result.stderr.strip()),
            )
        )

    def run_git_command(
        self, args: list[str], quiet: bool = False
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command and return the complete result.

        Never raises; the caller inspects the return code.

        Args:
            args: Git command arguments (without 'git')
            quiet: Discard output instead of capturing it

        Returns:
            CompletedProcess with stdout, stderr, and return code
        """
        cmd = ["git"] + args
        logger.debug(f"Running {self._format_command(args)}")
        try:
            if quiet:
                result = subprocess.run(
                    cmd,
                    cwd=self.repo_path,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    text=True,
                    timeout=300,
                )
                return subprocess.CompletedProcess(
                    args=cmd, returncode=result.returncode, stdout="", stderr=""
                )
            return subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                timeout=300,  # 5 minute timeout
            )
        except subprocess.TimeoutExpired as e:
            return subprocess.CompletedProcess(
                args=cmd,
                returncode=124,  # timeout exit code
                stdout="",
                stderr=f"Command timed out after 300 seconds: {self.redact(str(e))}",
            )
        except (OSError, PermissionError, FileNotFoundError) as e:
            # File system or permission errors
            return subprocess.CompletedProcess(
                args=cmd,
                returncode=1,
                stdout="",
                stderr=f"System error: {e}",
            )
        except Exception as e:
            wrapped = handle_unexpected_error(e, f"git command: {self._format_command(args)}")
            return subprocess.CompletedProcess(
                args=cmd,
                returncode=1,
                stdout="",
                stderr=self.redact(str(wrapped)),
            )
