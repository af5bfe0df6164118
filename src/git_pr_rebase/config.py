"""Configuration resolution from command line, environment and git remotes."""

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from git_pr_rebase.exceptions import ConfigurationError
from git_pr_rebase.git_ops import GitOps

ENV_OWNER = "GIT_PR_REBASE_OWNER"
ENV_REPO = "GIT_PR_REBASE_REPO"
ENV_API_URL = "GIT_PR_REBASE_API_URL"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "TOKEN")

DEFAULT_API_URL = "https://api.github.com"

# https://github.com/owner/name(.git), ssh://git@github.com/owner/name.git,
# git@github.com:owner/name.git
_REMOTE_URL_PATTERN = re.compile(
    r"^(?:[a-z+]+://(?:[^@/]+@)?[^/]+/|[^@:/]+@[^:]+:)"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class RepoConfig:
    """The GitHub repository pull requests are looked up in."""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class RebaseConfig:
    """Resolved settings for a single run."""

    repo: RepoConfig
    github_token: str
    api_url: str = DEFAULT_API_URL


def parse_remote_url(url: str) -> Optional[RepoConfig]:
    """Extract owner and repository name from a git remote URL."""
    match = _REMOTE_URL_PATTERN.match(url.strip())
    if not match:
        return None
    return RepoConfig(owner=match.group("owner"), name=match.group("name"))


def resolve_github_token(
    cli_token: Optional[str], environ: Optional[Mapping[str, str]] = None
) -> str:
    """Pick the token from the command line or the environment.

    Raises:
        ConfigurationError: If no token is available
    """
    if cli_token:
        return cli_token
    env = environ if environ is not None else os.environ
    for var in TOKEN_ENV_VARS:
        if env.get(var):
            return env[var]
    raise ConfigurationError(
        "No GitHub token provided",
        recovery_suggestion="Pass --github-token or set the GITHUB_TOKEN environment variable",
    )


def resolve_repo_config(
    git_ops: GitOps,
    owner: Optional[str] = None,
    name: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RepoConfig:
    """Resolve the repository from arguments, environment, then the origin remote.

    Raises:
        ConfigurationError: If owner or name cannot be determined
    """
    env = environ if environ is not None else os.environ
    owner = owner or env.get(ENV_OWNER)
    name = name or env.get(ENV_REPO)

    if not (owner and name):
        remote_url = git_ops.get_remote_url("origin")
        detected = parse_remote_url(remote_url) if remote_url else None
        if detected:
            owner = owner or detected.owner
            name = name or detected.name

    if not (owner and name):
        raise ConfigurationError(
            "Could not determine the GitHub repository",
            recovery_suggestion=(
                f"Pass --owner and --repo, set {ENV_OWNER} and {ENV_REPO}, "
                "or add an 'origin' remote pointing at GitHub"
            ),
        )
    return RepoConfig(owner=owner, name=name)


def load_config(
    git_ops: GitOps,
    github_token: Optional[str] = None,
    owner: Optional[str] = None,
    name: Optional[str] = None,
    api_url: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RebaseConfig:
    """Resolve the full configuration for a run."""
    env = environ if environ is not None else os.environ
    return RebaseConfig(
        repo=resolve_repo_config(git_ops, owner, name, env),
        github_token=resolve_github_token(github_token, env),
        api_url=api_url or env.get(ENV_API_URL) or DEFAULT_API_URL,
    )
