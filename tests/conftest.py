"""Shared fixtures for git-pr-rebase tests."""

from unittest.mock import MagicMock

import pytest

from git_pr_rebase.config import RepoConfig
from git_pr_rebase.models import PullRequestMetadata, PullRequestRef
from tests.helpers import FakeGitOps


@pytest.fixture
def fake_git_ops() -> FakeGitOps:
    return FakeGitOps()


@pytest.fixture
def repo_config() -> RepoConfig:
    return RepoConfig(owner="angular", name="angular")


@pytest.fixture
def pull_request() -> PullRequestMetadata:
    """PR #42 from org/fork:feature into angular/angular:main."""
    return PullRequestMetadata(
        number=42,
        state="OPEN",
        maintainer_can_modify=True,
        viewer_did_author=False,
        head_ref_oid="deadbeef",
        head_ref=PullRequestRef(
            name="feature",
            repository_url="https://github.com/org/fork",
            repository_name_with_owner="org/fork",
        ),
        base_ref=PullRequestRef(
            name="main",
            repository_url="https://github.com/angular/angular",
            repository_name_with_owner="angular/angular",
        ),
    )


@pytest.fixture
def mock_github(pull_request: PullRequestMetadata) -> MagicMock:
    github = MagicMock()
    github.get_pr.return_value = pull_request
    return github


@pytest.fixture
def graphql_pull_request() -> dict:
    """The ``pullRequest`` object as returned by the GitHub GraphQL API."""
    return {
        "state": "OPEN",
        "maintainerCanModify": True,
        "viewerDidAuthor": False,
        "headRefOid": "deadbeef",
        "headRef": {
            "name": "feature",
            "repository": {
                "url": "https://github.com/org/fork",
                "nameWithOwner": "org/fork",
            },
        },
        "baseRef": {
            "name": "main",
            "repository": {
                "url": "https://github.com/angular/angular",
                "nameWithOwner": "angular/angular",
            },
        },
    }
