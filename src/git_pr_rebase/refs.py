"""Derivation of remote refs, authenticated URLs and the push lease."""

from dataclasses import dataclass
from urllib.parse import quote, urlsplit, urlunsplit

from git_pr_rebase.models import PullRequestMetadata


def add_authentication_to_url(url: str, token: str) -> str:
    """Set the token as the username of the URL.

    Scheme, host, port, path, query and fragment are kept. Existing
    credentials are replaced. Reserved characters in the token are
    percent-encoded.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    netloc = f"{quote(token, safe='')}@{host}" if token else host
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def force_with_lease_flag(branch: str, expected_oid: str) -> str:
    """Lease binding a push of ``branch`` to the commit it was observed at."""
    return f"--force-with-lease={branch}:{expected_oid}"


@dataclass(frozen=True)
class RebaseRefs:
    """Everything derived from the PR metadata snapshot.

    The head ref has no remote-tracking branch since it is checked out
    detached, so the lease names the expected ref and commit explicitly.
    """

    head_branch: str
    base_branch: str
    full_head_ref: str
    full_base_ref: str
    head_repository_url: str
    head_ref_url: str
    base_ref_url: str
    force_with_lease_flag: str

    @classmethod
    def from_pull_request(cls, pr: PullRequestMetadata, token: str) -> "RebaseRefs":
        return cls(
            head_branch=pr.head_ref.name,
            base_branch=pr.base_ref.name,
            full_head_ref=pr.head_ref.full_name,
            full_base_ref=pr.base_ref.full_name,
            head_repository_url=pr.head_ref.repository_url,
            head_ref_url=add_authentication_to_url(pr.head_ref.repository_url, token),
            base_ref_url=add_authentication_to_url(pr.base_ref.repository_url, token),
            force_with_lease_flag=force_with_lease_flag(
                pr.head_ref.name, pr.head_ref_oid
            ),
        )

    @property
    def push_refspec(self) -> str:
        return f"HEAD:{self.head_branch}"
