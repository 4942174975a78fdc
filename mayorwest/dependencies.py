"""Precondition checks for commands that act on a repository.

All checks run and are reported together, so the user sees every problem at
once instead of fixing them one by one.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console

from mayorwest.git_utils import get_remote_url, is_git_repository
from mayorwest.github import GH_CLI_INSTALL_INSTRUCTIONS, is_gh_authenticated, is_gh_installed
from mayorwest.remote import RepositoryIdentity, parse_github_url


@dataclass
class DependencyResult:
    """Result of a single dependency check.

    Attributes:
        name: Identifier for the dependency check
        passed: Whether the check passed
        description: Human-readable description of the result
        fix_instructions: Instructions for fixing the issue (if failed)
        required: If True, failure blocks the command. If False, it's just a warning.
    """

    name: str
    passed: bool
    description: str
    fix_instructions: Optional[str] = None
    required: bool = True


def check_git_repo(path: Path) -> DependencyResult:
    if is_git_repository(path):
        return DependencyResult(name="git_repo", passed=True, description="Git repository detected")
    return DependencyResult(
        name="git_repo",
        passed=False,
        description="Not a git repository",
        fix_instructions="Run this from a git repository root, or run `git init` first",
    )


def check_github_remote(path: Path) -> Tuple[DependencyResult, Optional[RepositoryIdentity]]:
    """Check that origin exists and points at GitHub.

    Returns:
        Tuple of (result, identity); identity is None when the check fails
    """
    remote_url = get_remote_url(path)
    if remote_url is None:
        return DependencyResult(
            name="github_remote",
            passed=False,
            description="No git remote found",
            fix_instructions="Add a GitHub remote: git remote add origin https://github.com/<owner>/<repo>.git",
        ), None

    identity = parse_github_url(remote_url)
    if identity is None:
        return DependencyResult(
            name="github_remote",
            passed=False,
            description=f"Could not parse GitHub URL: {remote_url}",
            fix_instructions="Ensure the origin remote points to github.com",
        ), None

    return DependencyResult(
        name="github_remote",
        passed=True,
        description=f"GitHub repository: {identity.slug}",
    ), identity


def check_gh_installed() -> DependencyResult:
    if is_gh_installed():
        return DependencyResult(name="gh_installed", passed=True, description="GitHub CLI installed")
    return DependencyResult(
        name="gh_installed",
        passed=False,
        description="GitHub CLI not installed",
        fix_instructions=GH_CLI_INSTALL_INSTRUCTIONS,
    )


def check_gh_authenticated() -> DependencyResult:
    if is_gh_authenticated():
        return DependencyResult(name="gh_authenticated", passed=True, description="GitHub CLI authenticated")
    return DependencyResult(
        name="gh_authenticated",
        passed=False,
        description="GitHub CLI not authenticated",
        fix_instructions=(
            "Run `gh auth login` to authenticate.\n"
            "This will open your browser to log in to GitHub."
        ),
    )


def check_repository(
    repo_path: Path, require_gh: bool = False
) -> Tuple[bool, List[DependencyResult], Optional[RepositoryIdentity]]:
    """Run the repository preconditions and collect results.

    Checks are run in order:
    1. Git repository
    2. origin remote pointing at GitHub (skipped if not a repository)
    3. gh installed and authenticated (only with require_gh)

    Args:
        repo_path: Repository root
        require_gh: Whether the command needs the GitHub CLI

    Returns:
        Tuple of (success, results, identity)
    """
    results: List[DependencyResult] = []
    identity: Optional[RepositoryIdentity] = None

    git_result = check_git_repo(repo_path)
    results.append(git_result)

    if git_result.passed:
        remote_result, identity = check_github_remote(repo_path)
        results.append(remote_result)

    if require_gh:
        gh_result = check_gh_installed()
        results.append(gh_result)
        if gh_result.passed:
            results.append(check_gh_authenticated())
        else:
            results.append(
                DependencyResult(
                    name="gh_authenticated",
                    passed=False,
                    description="Skipped (gh not installed)",
                    fix_instructions="Install gh CLI first",
                )
            )

    success = all(r.passed for r in results if r.required)
    return success, results, identity


def print_dependency_report(results: List[DependencyResult], console: Optional[Console] = None) -> None:
    """Print failed checks with fix instructions, then passed ones."""
    console = console or Console()

    failures = [r for r in results if not r.passed]
    passed = [r for r in results if r.passed]

    for result in failures:
        marker = "[red]✗[/red]" if result.required else "[yellow]⚠[/yellow]"
        console.print(f"{marker} [bold]{result.description}[/bold]")
        if result.fix_instructions:
            console.print(f"  [dim]Fix:[/dim] {result.fix_instructions}")

    for result in passed:
        console.print(f"[green]✓[/green] {result.description}")
