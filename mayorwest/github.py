"""GitHub integration for Mayor West.

Everything here shells out to the GitHub CLI (gh). Read-only probes return a
ProbeResult so callers can tell "not configured" apart from "couldn't ask";
mutators raise RuntimeError like gh_command does.
"""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

from mayorwest.remote import RepositoryIdentity

log = logging.getLogger("mayorwest.github")

T = TypeVar("T")

GH_CLI_INSTALL_INSTRUCTIONS = (
    "Install from https://cli.github.com/\n"
    "  macOS:   brew install gh\n"
    "  Linux:   See https://github.com/cli/cli#installation\n"
    "  Windows: See https://github.com/cli/cli#installation"
)

AUTH_TIMEOUT = 5

SUGGESTED_ACTORS_QUERY = """\
query($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    suggestedActors(first: 100, capabilities: CAN_BE_ASSIGNED) {
      nodes { ... on Bot { login } }
    }
  }
}"""

# Minimal protection: enough for auto-merge, no required reviews
MINIMAL_BRANCH_PROTECTION = {
    "required_status_checks": {"strict": False, "contexts": []},
    "enforce_admins": False,
    "required_pull_request_reviews": None,
    "restrictions": None,
}


@dataclass(frozen=True)
class ProbeResult(Generic[T]):
    """Outcome of a read-only GitHub query.

    Exactly one of value / reason is meaningful: ok results carry a value,
    unavailable results carry the reason the question couldn't be answered.
    """

    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> "ProbeResult[T]":
        return cls(value=value)

    @classmethod
    def unavailable(cls, reason: str) -> "ProbeResult[T]":
        return cls(reason=reason)


def is_gh_installed() -> bool:
    return shutil.which("gh") is not None


def is_gh_authenticated() -> bool:
    """Check `gh auth status`, with a short timeout for network trouble."""
    try:
        result = subprocess.run(
            ["gh", "auth", "status"],
            capture_output=True,
            text=True,
            timeout=AUTH_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        log.debug("gh auth status failed: %s", e)
        return False
    return result.returncode == 0


def ensure_gh_cli() -> None:
    """Ensure gh CLI is installed and authenticated.

    Raises:
        RuntimeError: If gh not found or not authenticated
    """
    if not is_gh_installed():
        raise RuntimeError(f"GitHub CLI (gh) not found.\n\n{GH_CLI_INSTALL_INSTRUCTIONS}\n")

    if not is_gh_authenticated():
        raise RuntimeError(
            "Not authenticated with GitHub.\n\n"
            "Run: gh auth login\n\n"
            "This will open your browser to authenticate.\n"
        )


def gh_command(args: List[str], input: Optional[str] = None) -> str:
    """Run a gh (GitHub CLI) command.

    Args:
        args: Command arguments
        input: Text passed on stdin (for `--input -` or secret values)

    Returns:
        Command output

    Raises:
        RuntimeError: If gh command fails
    """
    log.debug("gh %s", " ".join(args))
    try:
        result = subprocess.run(
            ["gh"] + args,
            input=input,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"GitHub CLI command failed: {e.stderr.strip()}") from e
    except FileNotFoundError as e:
        raise RuntimeError("GitHub CLI (gh) not found") from e


def _api_json(args: List[str]) -> Any:
    return json.loads(gh_command(["api"] + args))


def _probe(description: str, fn: Any) -> ProbeResult:
    try:
        return ProbeResult.success(fn())
    except (RuntimeError, ValueError, KeyError, TypeError, AttributeError) as e:
        log.debug("Probe '%s' unavailable: %s", description, e)
        return ProbeResult.unavailable(str(e))


# Probes


def probe_auto_merge(identity: RepositoryIdentity) -> ProbeResult[bool]:
    """Whether the repository allows auto-merge."""
    return _probe(
        "auto-merge",
        lambda: bool(_api_json([f"repos/{identity.slug}"]).get("allow_auto_merge")),
    )


def probe_workflow_permissions(identity: RepositoryIdentity) -> ProbeResult[bool]:
    """Whether the default GITHUB_TOKEN permission is write."""
    def read() -> bool:
        data = _api_json([f"repos/{identity.slug}/actions/permissions/workflow"])
        return data.get("default_workflow_permissions") == "write"

    return _probe("workflow permissions", read)


def probe_branch_protection(identity: RepositoryIdentity, branch: str) -> ProbeResult[bool]:
    """Whether the branch has protection rules.

    A 404 from the API means "not protected", which is a real answer; any
    other failure leaves the question unanswered.
    """
    try:
        gh_command(["api", f"repos/{identity.slug}/branches/{branch}/protection"])
    except RuntimeError as e:
        message = str(e)
        if "Not Found" in message or "not protected" in message.lower() or "404" in message:
            return ProbeResult.success(False)
        log.debug("Branch protection probe unavailable: %s", e)
        return ProbeResult.unavailable(message)
    return ProbeResult.success(True)


def probe_secret(identity: RepositoryIdentity, name: str) -> ProbeResult[bool]:
    """Whether an Actions secret with this name exists."""
    def read() -> bool:
        data = _api_json([f"repos/{identity.slug}/actions/secrets"])
        return any(secret["name"] == name for secret in data.get("secrets", []))

    return _probe(f"secret {name}", read)


def probe_agent_assignable(identity: RepositoryIdentity, login: str) -> ProbeResult[bool]:
    """Whether a bot account can be assigned to issues in the repository."""
    def read() -> bool:
        data = _api_json([
            "graphql",
            "-f", f"query={SUGGESTED_ACTORS_QUERY}",
            "-f", f"owner={identity.owner}",
            "-f", f"repo={identity.repo}",
        ])
        nodes = data["data"]["repository"]["suggestedActors"]["nodes"]
        return any(node.get("login") == login for node in nodes if node)

    return _probe("assignable agent", read)


# Mutators


def enable_auto_merge(identity: RepositoryIdentity, delete_branch: bool = True) -> None:
    """Allow auto-merge and squash merges on the repository.

    Raises:
        RuntimeError: If the API call fails
    """
    gh_command([
        "api", f"repos/{identity.slug}", "-X", "PATCH",
        "-F", "allow_auto_merge=true",
        "-F", "allow_squash_merge=true",
        "-F", f"delete_branch_on_merge={'true' if delete_branch else 'false'}",
    ])


def set_workflow_permissions(identity: RepositoryIdentity) -> None:
    """Give workflows write permission and let them approve pull requests.

    Raises:
        RuntimeError: If the API call fails
    """
    gh_command([
        "api", f"repos/{identity.slug}/actions/permissions/workflow", "-X", "PUT",
        "-f", "default_workflow_permissions=write",
        "-F", "can_approve_pull_request_reviews=true",
    ])


def set_branch_protection(identity: RepositoryIdentity, branch: str) -> None:
    """Apply minimal branch protection so auto-merge can be used.

    Raises:
        RuntimeError: If the API call fails
    """
    gh_command(
        [
            "api", f"repos/{identity.slug}/branches/{branch}/protection",
            "-X", "PUT", "--input", "-",
        ],
        input=json.dumps(MINIMAL_BRANCH_PROTECTION),
    )


def set_secret(identity: RepositoryIdentity, name: str, value: str) -> None:
    """Store an Actions secret.

    Raises:
        RuntimeError: If gh fails
    """
    # gh reads the value from stdin when --body is omitted
    gh_command(["secret", "set", name, "--repo", identity.slug], input=value)
