"""Git utility functions for Mayor West.

All functions call git directly via subprocess. A non-zero exit means the
information is unavailable, so readers return None/False instead of raising.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

log = logging.getLogger("mayorwest.git")


def _git(args: Sequence[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )


def is_git_repository(cwd: Optional[Path] = None) -> bool:
    """Check whether cwd is inside a git work tree.

    Returns:
        True if `git rev-parse --git-dir` succeeds
    """
    try:
        result = _git(["rev-parse", "--git-dir"], cwd)
    except FileNotFoundError:
        log.debug("git executable not found")
        return False
    return result.returncode == 0


def get_remote_url(cwd: Optional[Path] = None, remote: str = "origin") -> Optional[str]:
    """Get the configured URL of a remote.

    Args:
        cwd: Repository directory (default: current directory)
        remote: Remote name

    Returns:
        The remote URL, or None if git is missing or the remote isn't set
    """
    try:
        result = _git(["config", "--get", f"remote.{remote}.url"], cwd)
    except FileNotFoundError:
        return None
    if result.returncode != 0:
        return None
    url = result.stdout.strip()
    return url or None


def get_current_branch(cwd: Optional[Path] = None) -> Optional[str]:
    """Get current git branch name.

    Returns:
        Current branch name, or None if it can't be determined
    """
    try:
        result = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
    except FileNotFoundError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def get_default_branch(cwd: Optional[Path] = None) -> str:
    """Get the default branch name for the remote.

    Tries to detect from origin/HEAD, falls back to 'main'.

    Returns:
        Default branch name (e.g., 'main' or 'master')
    """
    try:
        result = _git(["symbolic-ref", "refs/remotes/origin/HEAD"], cwd)
    except FileNotFoundError:
        return "main"
    if result.returncode == 0:
        # Output is like "refs/remotes/origin/main"
        ref = result.stdout.strip()
        if ref.startswith("refs/remotes/origin/"):
            return ref[len("refs/remotes/origin/"):]
    return "main"


def commit_and_push(paths: Sequence[str], message: str, cwd: Optional[Path] = None) -> tuple[bool, str]:
    """Stage the given paths, commit them and push the current branch.

    Args:
        paths: Repository-relative paths to stage
        message: Commit message
        cwd: Repository directory

    Returns:
        Tuple of (success, message)
    """
    if not paths:
        return False, "Nothing to commit"

    steps = [
        ["add", "--", *paths],
        ["commit", "-m", message],
        ["push"],
    ]
    for step in steps:
        try:
            result = _git(step, cwd)
        except FileNotFoundError:
            return False, "git not found"
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            log.debug("git %s failed: %s", step[0], detail)
            return False, f"git {step[0]} failed: {detail}"

    return True, "Committed and pushed"
