"""Resolve a GitHub repository identity from a git remote URL."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mayorwest.git_utils import get_remote_url

GITHUB_HOST = "github.com"

# https://[user[:token]@]host/owner/repo[.git][/]
_HTTPS_RE = re.compile(
    r"^https?://(?:[^@/]+@)?(?P<host>[^/:@]+)(?::\d+)?/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)
# ssh://[user@]host[:port]/owner/repo[.git]
_SSH_URL_RE = re.compile(
    r"^ssh://(?:[^@/]+@)?(?P<host>[^/:@]+)(?::\d+)?/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)
# user@host:owner/repo[.git]
_SCP_RE = re.compile(
    r"^[^@/:]+@(?P<host>[^/:@]+):(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"
)


@dataclass(frozen=True)
class RepositoryIdentity:
    """Owner and name of a GitHub repository."""

    owner: str
    repo: str

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("owner and repo must be non-empty")

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.slug


def _host_matches(host: str, allow_subdomains: bool) -> bool:
    host = host.lower()
    if host == GITHUB_HOST:
        return True
    return allow_subdomains and host.endswith("." + GITHUB_HOST)


def parse_github_url(url: Optional[str], allow_subdomains: bool = False) -> Optional[RepositoryIdentity]:
    """Parse owner/repo from a GitHub remote URL.

    Handles URLs like:
    - https://github.com/owner/repo(.git)
    - git@github.com:owner/repo(.git)
    - ssh://git@github.com/owner/repo(.git)

    Args:
        url: Remote URL string
        allow_subdomains: Also accept hosts like api.github.com

    Returns:
        RepositoryIdentity, or None if the URL isn't a GitHub repository URL
    """
    if not url:
        return None
    url = url.strip()

    for pattern in (_HTTPS_RE, _SSH_URL_RE, _SCP_RE):
        match = pattern.match(url)
        if match is None:
            continue
        if not _host_matches(match.group("host"), allow_subdomains):
            return None
        owner, repo = match.group("owner"), match.group("repo")
        if not owner or not repo or repo == ".git":
            return None
        return RepositoryIdentity(owner=owner, repo=repo)

    return None


def resolve_repository(cwd: Optional[Path] = None, allow_subdomains: bool = False) -> Optional[RepositoryIdentity]:
    """Read remote.origin.url and resolve it to a repository identity.

    Returns:
        RepositoryIdentity, or None if there is no origin or it isn't GitHub
    """
    return parse_github_url(get_remote_url(cwd), allow_subdomains=allow_subdomains)
