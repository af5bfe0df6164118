"""Pull request metadata fetched once per run."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class PullRequestRef:
    """One side of a pull request: a branch in an owning repository."""

    name: str
    repository_url: str
    repository_name_with_owner: str

    @property
    def full_name(self) -> str:
        """Display form, e.g. ``angular/angular:main``."""
        return f"{self.repository_name_with_owner}:{self.name}"

    @classmethod
    def from_graphql(cls, data: Dict[str, Any]) -> "PullRequestRef":
        repository = data["repository"]
        return cls(
            name=data["name"],
            repository_url=repository["url"],
            repository_name_with_owner=repository["nameWithOwner"],
        )


@dataclass(frozen=True)
class PullRequestMetadata:
    """Facts about a pull request needed to rebase and push it safely.

    ``state`` is informational only. ``head_ref_oid`` is the commit the head
    branch is expected to be at on the remote and becomes the push lease.
    """

    number: int
    state: str
    maintainer_can_modify: bool
    viewer_did_author: bool
    head_ref_oid: str
    head_ref: PullRequestRef
    base_ref: PullRequestRef

    @property
    def can_push(self) -> bool:
        """Whether the current actor may push to the head branch."""
        return self.maintainer_can_modify or self.viewer_did_author

    @classmethod
    def from_graphql(cls, number: int, data: Dict[str, Any]) -> "PullRequestMetadata":
        """Build metadata from the ``pullRequest`` object of a GraphQL response.

        Raises:
            KeyError: If a required field is missing
        """
        return cls(
            number=number,
            state=data["state"],
            maintainer_can_modify=bool(data["maintainerCanModify"]),
            viewer_did_author=bool(data["viewerDidAuthor"]),
            head_ref_oid=data["headRefOid"],
            head_ref=PullRequestRef.from_graphql(data["headRef"]),
            base_ref=PullRequestRef.from_graphql(data["baseRef"]),
        )
