"""Exception hierarchy and user-facing error reporting."""

import logging
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class GitPrRebaseError(Exception):
    """Base class for errors that are reported to the user without a traceback."""

    def __init__(self, message: str, recovery_suggestion: Optional[str] = None) -> None:
        """Initialize the error.

        Args:
            message: Human readable description of what went wrong
            recovery_suggestion: Optional hint on how the user can fix it
        """
        super().__init__(message)
        self.message = message
        self.recovery_suggestion = recovery_suggestion


class RepositoryStateError(GitPrRebaseError):
    """The local repository is not in a state the rebase can start from."""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message, recovery_suggestion)
        self.current_state = current_state


class ConfigurationError(GitPrRebaseError):
    """Required configuration (token, repository) could not be resolved."""


class GitHubApiError(GitPrRebaseError):
    """The GitHub API request failed or returned an unusable response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message, recovery_suggestion)
        self.status_code = status_code


class UserCancelledError(GitPrRebaseError):
    """The user interrupted the operation."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} cancelled by user")
        self.operation = operation


class ErrorReporter:
    """Formats errors for the terminal."""

    @staticmethod
    def report_error(error: GitPrRebaseError, stream: Optional[TextIO] = None) -> None:
        """Print an error and its recovery suggestion.

        Args:
            error: Error to report
            stream: Output stream, stderr by default
        """
        out = stream if stream is not None else sys.stderr
        print(f"✗ {error.message}", file=out)
        current_state = getattr(error, "current_state", None)
        if current_state:
            print(f"  Current state: {current_state}", file=out)
        if error.recovery_suggestion:
            print(f"  Suggestion: {error.recovery_suggestion}", file=out)


def handle_unexpected_error(
    error: BaseException, context: str, recovery_suggestion: Optional[str] = None
) -> GitPrRebaseError:
    """Wrap an unexpected exception so it can be reported uniformly.

    Args:
        error: The original exception
        context: Short description of what was being done
        recovery_suggestion: Optional hint for the user

    Returns:
        A GitPrRebaseError describing the failure
    """
    logger.debug(f"Unexpected error during {context}", exc_info=error)
    wrapped = GitPrRebaseError(
        f"Unexpected error during {context}: {error}",
        recovery_suggestion=recovery_suggestion,
    )
    wrapped.__cause__ = error
    return wrapped
