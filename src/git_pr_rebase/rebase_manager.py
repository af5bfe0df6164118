"""Rebase a pull request onto its base branch and push the result back."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Protocol

from git_pr_rebase.config import RepoConfig
from git_pr_rebase.git_ops import GitOps
from git_pr_rebase.models import PullRequestMetadata
from git_pr_rebase.prompts import Prompter, is_interactive
from git_pr_rebase.refs import RebaseRefs
from git_pr_rebase.result import GitResult, Ok

logger = logging.getLogger(__name__)


class PullRequestSource(Protocol):
    """Anything that can resolve pull request metadata, e.g. GitHubClient."""

    def get_pr(self, pr_number: int, repo: RepoConfig) -> PullRequestMetadata: ...


class RebaseOutcome(Enum):
    """How a rebase run ended."""

    SUCCESS = "success"
    DIRTY_WORKING_TREE = "dirty_working_tree"
    UNAUTHORIZED = "unauthorized"
    GIT_FAILURE = "git_failure"
    INTERRUPTED = "interrupted"
    CONFLICT_ABORTED = "conflict_aborted"
    CONFLICT_MANUAL = "conflict_manual"


@dataclass(frozen=True)
class RebaseResult:
    """Outcome of a run plus a message for the user."""

    outcome: RebaseOutcome
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome is RebaseOutcome.SUCCESS

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


class RebaseSession:
    """State of one rebase run: the PR, its derived refs and the restore target."""

    def __init__(
        self,
        git_ops: GitOps,
        pr_number: int,
        previous_branch_or_revision: str,
        refs: RebaseRefs,
    ) -> None:
        """Initialize the session.

        Args:
            git_ops: Git operations handler
            pr_number: Pull request being rebased
            previous_branch_or_revision: What was checked out before the run;
                captured before any git command that changes the working tree
            refs: Refs and URLs derived from the PR metadata snapshot
        """
        self.git_ops = git_ops
        self.pr_number = pr_number
        self.previous_branch_or_revision = previous_branch_or_revision
        self.refs = refs

    @property
    def push_command(self) -> str:
        """Push command for the operator, without the token."""
        return (
            f"git push {self.refs.head_repository_url} {self.refs.push_refspec} "
            f"{self.refs.force_with_lease_flag}"
        )

    @property
    def recovery_command(self) -> str:
        return (
            "git rebase --abort && git reset --hard && "
            f"git checkout {self.previous_branch_or_revision}"
        )

    def cleanup(self) -> None:
        """Restore the repository to the branch or revision checked out before the run.

        Best effort and safe to call repeatedly. Failures are logged, never raised.
        """
        for args in (
            ["rebase", "--abort"],
            ["reset", "--hard"],
            ["checkout", self.previous_branch_or_revision],
        ):
            try:
                result = self.git_ops.run_git_command(args, quiet=True)
            except Exception as e:
                logger.debug(f"Cleanup step 'git {' '.join(args)}' raised: {e}")
                continue
            if result.returncode != 0:
                # rebase --abort fails when no rebase is in progress
                logger.debug(
                    f"Cleanup step 'git {' '.join(args)}' exited with {result.returncode}"
                )


class PrRebaser:
    """Runs the fetch, rebase and push sequence for a single pull request."""

    def __init__(
        self,
        git_ops: GitOps,
        github: PullRequestSource,
        repo: RepoConfig,
        github_token: str,
        prompter: Prompter,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.git_ops = git_ops
        self.github = github
        self.repo = repo
        self.github_token = github_token
        self.prompter = prompter
        self.environ = environ if environ is not None else os.environ

    def rebase(self, pr_number: int) -> RebaseResult:
        """Rebase the PR onto its base branch and push it to the head repository.

        Args:
            pr_number: Pull request number

        Returns:
            RebaseResult describing how the run ended

        Raises:
            GitHubApiError: If the PR metadata cannot be fetched. Nothing has
                been changed in the repository at that point.
        """
        if self.git_ops.has_local_changes():
            return RebaseResult(
                RebaseOutcome.DIRTY_WORKING_TREE,
                "Cannot perform rebase of PR with local changes.",
            )

        previous_branch_or_revision = self.git_ops.get_current_branch_or_revision()
        pr = self.github.get_pr(pr_number, self.repo)
        refs = RebaseRefs.from_pull_request(pr, self.github_token)

        if not pr.can_push:
            return RebaseResult(
                RebaseOutcome.UNAUTHORIZED,
                "Cannot rebase as you did not author the PR and the PR does not "
                "allow maintainers to modify the PR",
            )

        session = RebaseSession(
            self.git_ops, pr_number, previous_branch_or_revision, refs
        )

        try:
            rebase_result = self._fetch_and_rebase(session)
            if rebase_result.is_err():
                return self._fail(session, str(rebase_result.unwrap_err()))

            if rebase_result.unwrap():
                push_result = self._push(session)
                if push_result.is_err():
                    return self._fail(session, str(push_result.unwrap_err()))
                print(f"Rebased and updated PR #{pr_number}")
                session.cleanup()
                return RebaseResult(
                    RebaseOutcome.SUCCESS, f"Rebased and updated PR #{pr_number}"
                )
        except KeyboardInterrupt:
            session.cleanup()
            return RebaseResult(
                RebaseOutcome.INTERRUPTED,
                "Rebase interrupted by user, repository restored to its previous state",
            )
        except Exception as e:
            logger.debug("Unexpected error during rebase", exc_info=True)
            return self._fail(session, self.git_ops.redact(str(e)))

        return self._handle_conflict(session)

    def _fetch_and_rebase(self, session: RebaseSession) -> GitResult[bool]:
        """Check out the PR head detached and rebase it onto the base branch.

        Returns:
            Ok(True) for a clean rebase, Ok(False) when the rebase stopped,
            Err if any other step failed
        """
        refs = session.refs
        number = session.pr_number

        print(f"Checking out PR #{number} from {refs.full_head_ref}")
        result = self.git_ops.run(["fetch", refs.head_ref_url, refs.head_branch])
        if result.is_err():
            return result
        result = self.git_ops.run(["checkout", "--detach", "FETCH_HEAD"])
        if result.is_err():
            return result

        print(f"Fetching {refs.full_base_ref} to rebase #{number} on")
        result = self.git_ops.run(["fetch", refs.base_ref_url, refs.base_branch])
        if result.is_err():
            return result

        print(f"Attempting to rebase PR #{number} on {refs.full_base_ref}")
        rebase = self.git_ops.run_git_command(["rebase", "FETCH_HEAD"])
        # Any non-zero status is treated as a conflict, including hook failures
        logger.debug(f"git rebase exited with {rebase.returncode}")
        if rebase.returncode != 0:
            for output in (rebase.stdout, rebase.stderr):
                if output and output.strip():
                    print(self.git_ops.redact(output.rstrip()))
        return Ok(rebase.returncode == 0)

    def _push(self, session: RebaseSession) -> GitResult[str]:
        refs = session.refs
        print("Rebase was able to complete automatically without conflicts")
        print(f"Pushing rebased PR #{session.pr_number} to {refs.full_head_ref}")
        return self.git_ops.run(
            ["push", refs.head_ref_url, refs.push_refspec, refs.force_with_lease_flag]
        )

    def _fail(self, session: RebaseSession, message: str) -> RebaseResult:
        session.cleanup()
        return RebaseResult(RebaseOutcome.GIT_FAILURE, message)

    def _handle_conflict(self, session: RebaseSession) -> RebaseResult:
        print("Rebase was unable to complete automatically without conflicts.")

        detail = (
            f"PR #{session.pr_number} ({session.refs.full_head_ref}) conflicts "
            f"with {session.refs.full_base_ref}"
        )
        if is_interactive(self.environ) and self._confirm(
            "Manually complete rebase?", detail
        ):
            for line in self.manual_completion_instructions(session):
                print(line)
            return RebaseResult(
                RebaseOutcome.CONFLICT_MANUAL,
                f"Rebase of PR #{session.pr_number} left in progress for manual completion",
            )

        print("Cleaning up git state, and restoring previous state.")
        session.cleanup()
        return RebaseResult(
            RebaseOutcome.CONFLICT_ABORTED,
            f"Rebase of PR #{session.pr_number} aborted due to conflicts",
        )

    def _confirm(self, question: str, detail: Optional[str] = None) -> bool:
        try:
            return self.prompter.confirm(question, detail=detail)
        except (KeyboardInterrupt, EOFError):
            return False
        except Exception as e:
            logger.warning(f"Prompt failed, aborting rebase: {e}")
            return False

    @staticmethod
    def manual_completion_instructions(session: RebaseSession) -> List[str]:
        """Commands the operator needs after resolving conflicts by hand."""
        return [
            "After manually completing rebase, run the following command to "
            f"update PR #{session.pr_number}:",
            f" $ {session.push_command}",
            "",
            "To abort the rebase and return to the state of the repository "
            "before this command",
            "run the following command:",
            f" $ {session.recovery_command}",
        ]
