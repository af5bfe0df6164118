"""GitHub GraphQL client for pull request metadata."""

import logging
import time
from typing import Any, Dict, Optional

import requests

from git_pr_rebase.config import DEFAULT_API_URL, RepoConfig
from git_pr_rebase.exceptions import GitHubApiError
from git_pr_rebase.models import PullRequestMetadata

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30
MAX_ATTEMPTS = 3
RETRYABLE_STATUS_CODES = (502, 503, 504)
RATE_LIMIT_STATUS_CODES = (403, 429)
RATE_LIMIT_BUFFER_SECONDS = 5
RATE_LIMIT_DEFAULT_WAIT_SECONDS = 60
# Longer waits are reported instead of blocking the command
RATE_LIMIT_MAX_WAIT_SECONDS = 120

PR_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      state
      maintainerCanModify
      viewerDidAuthor
      headRefOid
      headRef {
        name
        repository {
          url
          nameWithOwner
        }
      }
      baseRef {
        name
        repository {
          url
          nameWithOwner
        }
      }
    }
  }
}
"""


def graphql_endpoint(api_url: str) -> str:
    """GraphQL endpoint for a REST API base URL.

    GitHub Enterprise serves REST under ``/api/v3`` and GraphQL under
    ``/api/graphql``, so a trailing ``/v3`` is dropped.
    """
    base = api_url.rstrip("/")
    if base.endswith("/api/v3"):
        base = base[: -len("/v3")]
    return f"{base}/graphql"


def rate_limit_wait(response: requests.Response) -> Optional[int]:
    """Seconds to wait when the response is a rate limit rejection, else None."""
    if response.status_code not in RATE_LIMIT_STATUS_CODES:
        return None

    headers = response.headers
    exhausted = headers.get("X-RateLimit-Remaining") == "0"
    if not exhausted and "rate limit" not in response.text.lower():
        return None

    retry_after = headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)

    try:
        reset_timestamp = int(headers.get("X-RateLimit-Reset", ""))
    except ValueError:
        return RATE_LIMIT_DEFAULT_WAIT_SECONDS
    return max(0, reset_timestamp - int(time.time())) + RATE_LIMIT_BUFFER_SECONDS


class GitHubClient:
    """Minimal GitHub API client authenticated with a personal access token."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        backoff_seconds: float = 1.0,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.backoff_seconds = backoff_seconds

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Connection errors and gateway errors are retried with exponential
        backoff. Rate limit rejections wait for the limit to reset when
        that is close enough.

        Raises:
            GitHubApiError: If the request fails or the response has errors
        """
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        url = graphql_endpoint(self.api_url)

        for attempt in range(MAX_ATTEMPTS):
            last_attempt = attempt == MAX_ATTEMPTS - 1
            try:
                response = self.session.post(
                    url,
                    headers=headers,
                    json={"query": query, "variables": variables},
                    timeout=REQUEST_TIMEOUT_SECONDS,
                )
            except requests.exceptions.RequestException as e:
                if last_attempt:
                    raise GitHubApiError(
                        f"GitHub API request failed after {MAX_ATTEMPTS} attempts: {e}",
                        recovery_suggestion="Check your network connection",
                    ) from e
                self._backoff(attempt, f"connection error: {e}")
                continue

            wait = rate_limit_wait(response)
            if wait is not None:
                if last_attempt or wait > RATE_LIMIT_MAX_WAIT_SECONDS:
                    raise GitHubApiError(
                        "GitHub API rate limit exceeded",
                        status_code=response.status_code,
                        recovery_suggestion=f"Retry in {wait} seconds",
                    )
                logger.warning(
                    f"GitHub API rate limit exceeded "
                    f"(attempt {attempt + 1}/{MAX_ATTEMPTS}), waiting {wait}s..."
                )
                time.sleep(wait)
                continue

            if response.status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                self._backoff(attempt, f"status {response.status_code}")
                continue

            return self._parse_response(response)

        # Unreachable: the last attempt either returns or raises
        raise AssertionError("GraphQL retry loop exited without a response")

    def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.backoff_seconds * (2**attempt)
        logger.warning(
            f"GraphQL request failed with {reason} "
            f"(attempt {attempt + 1}/{MAX_ATTEMPTS}), retrying in {delay}s..."
        )
        time.sleep(delay)

    def _parse_response(self, response: requests.Response) -> Dict[str, Any]:
        if response.status_code == 401:
            raise GitHubApiError(
                "GitHub rejected the provided token",
                status_code=401,
                recovery_suggestion="Pass a valid token with --github-token or GITHUB_TOKEN",
            )
        if response.status_code != 200:
            raise GitHubApiError(
                f"GitHub API request failed with status {response.status_code}: "
                f"{response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GitHubApiError(f"GitHub API returned invalid JSON: {e}") from e

        errors = body.get("errors")
        if errors:
            messages = "; ".join(err.get("message", str(err)) for err in errors)
            raise GitHubApiError(f"GitHub API returned errors: {messages}")

        return body.get("data") or {}

    def get_pr(self, pr_number: int, repo: RepoConfig) -> PullRequestMetadata:
        """Fetch the metadata of a pull request.

        Args:
            pr_number: Pull request number
            repo: Repository the pull request belongs to

        Raises:
            GitHubApiError: If the pull request does not exist or the call fails
        """
        logger.debug(f"Fetching PR #{pr_number} from {repo.owner}/{repo.name}")
        data = self.graphql(
            PR_QUERY,
            {"owner": repo.owner, "name": repo.name, "number": pr_number},
        )

        repository = data.get("repository")
        pull_request = repository.get("pullRequest") if repository else None
        if not pull_request:
            raise GitHubApiError(
                f"Pull request #{pr_number} not found in {repo.owner}/{repo.name}"
            )

        try:
            return PullRequestMetadata.from_graphql(pr_number, pull_request)
        except (KeyError, TypeError) as e:
            # headRef is null when the head branch or fork was deleted
            raise GitHubApiError(
                f"Pull request #{pr_number} is missing required data: {e}",
                recovery_suggestion="Check that the head branch and repository still exist",
            ) from e
