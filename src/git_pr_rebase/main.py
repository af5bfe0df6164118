"""CLI entry point for git-pr-rebase."""

import argparse
import logging
import subprocess
import sys
from typing import List, Optional

from git_pr_rebase import __version__
from git_pr_rebase.config import load_config
from git_pr_rebase.exceptions import (
    ErrorReporter,
    GitPrRebaseError,
    RepositoryStateError,
    UserCancelledError,
    handle_unexpected_error,
)
from git_pr_rebase.git_ops import GitOps
from git_pr_rebase.github import GitHubClient
from git_pr_rebase.prompts import ConsolePrompter, Prompter, TextualPrompter
from git_pr_rebase.rebase_manager import PrRebaser


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid PR number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"invalid PR number: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-pr-rebase",
        description="Rebase a pull request onto its target branch and push it back",
    )
    parser.add_argument("pr_number", type=_positive_int, help="Pull request number")
    parser.add_argument(
        "--github-token",
        help="GitHub token used for the API and for fetching/pushing "
        "(default: $GITHUB_TOKEN or $TOKEN)",
    )
    parser.add_argument("--owner", help="Owner of the GitHub repository")
    parser.add_argument("--repo", help="Name of the GitHub repository")
    parser.add_argument("--api-url", help="GitHub API base URL")
    parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Ask for confirmation with a plain text prompt instead of the TUI",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for git-pr-rebase command."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        git_ops = GitOps()

        if not git_ops.is_git_available():
            error = RepositoryStateError(
                "Git is not installed or not available in PATH",
                recovery_suggestion="Please install git and ensure it's available in your PATH environment variable",
            )
            ErrorReporter.report_error(error)
            sys.exit(1)

        if not git_ops.is_git_repo():
            error = RepositoryStateError(
                "Not in a git repository",
                recovery_suggestion="Run this command from within a git repository",
            )
            ErrorReporter.report_error(error)
            sys.exit(1)

        config = load_config(
            git_ops,
            github_token=args.github_token,
            owner=args.owner,
            name=args.repo,
            api_url=args.api_url,
        )
        git_ops.secret = config.github_token

        prompter: Prompter = ConsolePrompter() if args.no_tui else TextualPrompter()
        rebaser = PrRebaser(
            git_ops,
            GitHubClient(config.github_token, api_url=config.api_url),
            config.repo,
            config.github_token,
            prompter,
        )
        result = rebaser.rebase(args.pr_number)

        if not result.succeeded:
            ErrorReporter.report_error(GitPrRebaseError(result.message))
        sys.exit(result.exit_code)

    except GitPrRebaseError as e:
        ErrorReporter.report_error(e)
        sys.exit(1)
    except KeyboardInterrupt:
        cancel_error = UserCancelledError("git-pr-rebase operation")
        ErrorReporter.report_error(cancel_error)
        sys.exit(130)
    except (subprocess.SubprocessError, FileNotFoundError) as e:
        wrapped = handle_unexpected_error(
            e, "git operation", "Check git installation and repository state"
        )
        ErrorReporter.report_error(wrapped)
        sys.exit(1)
    except Exception as e:
        wrapped = handle_unexpected_error(e, "git-pr-rebase execution")
        ErrorReporter.report_error(wrapped)
        sys.exit(1)


if __name__ == "__main__":
    main()
