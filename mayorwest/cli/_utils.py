"""Shared utilities for CLI modules."""

import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from mayorwest.dependencies import check_repository, print_dependency_report
from mayorwest.git_utils import commit_and_push
from mayorwest.remote import RepositoryIdentity

# Shared Rich console instance for all CLI modules
console = Console()


def get_repo_path() -> Path:
    """Get the repository root path."""
    return Path.cwd()


def header(title: str) -> None:
    console.print(f"\n[bold cyan]═══ {title} ═══[/bold cyan]\n")


def require_repository(repo_path: Path, require_gh: bool = False) -> RepositoryIdentity:
    """Require a git repository whose origin is on GitHub.

    Args:
        repo_path: Repository root
        require_gh: Also require an installed, authenticated gh CLI

    Returns:
        The repository identity

    Exits:
        With code 1 if any precondition fails
    """
    success, results, identity = check_repository(repo_path, require_gh=require_gh)
    if not success or identity is None:
        print_dependency_report(results, console)
        console.print("\n[yellow]Please resolve the issues above and try again.[/yellow]")
        sys.exit(1)
    return identity


def commit_files(repo_path: Path, paths: Sequence[str], message: str) -> bool:
    """Commit and push paths, printing the outcome. Failure is only a warning."""
    with console.status("Committing changes..."):
        ok, detail = commit_and_push(paths, message, cwd=repo_path)
    if ok:
        console.print("[green]✓ Changes committed and pushed[/green]")
    else:
        console.print(f"[yellow]Warning: could not commit: {escape(detail)}[/yellow]")
    return ok


__all__ = [
    "console",
    "get_repo_path",
    "header",
    "require_repository",
    "commit_files",
]
