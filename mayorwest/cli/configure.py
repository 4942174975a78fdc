"""Repository configuration commands (configure, pause, resume)."""

import sys
from typing import Callable, List, Optional, Tuple

import click
from rich.markup import escape

from mayorwest import github
from mayorwest.cli._utils import commit_files, console, get_repo_path, header, require_repository
from mayorwest.config import (
    OPTIONAL_PROTECTED_PATHS,
    SECURITY_CONFIG_PATH,
    ConfigError,
    MergeMethod,
    SecurityConfig,
    load_security_config,
    save_security_config,
    set_security_config_enabled,
)
from mayorwest.content import AGENT_TOKEN_SECRET
from mayorwest.git_utils import get_default_branch
from mayorwest.remote import RepositoryIdentity


def _apply_repository_settings(identity: RepositoryIdentity, branch: str) -> List[Tuple[str, Optional[str]]]:
    """Apply GitHub settings one step at a time; a failed step doesn't stop the rest.

    Returns:
        List of (step name, error message or None)
    """
    steps: List[Tuple[str, Callable[[], None]]] = [
        ("Auto-merge enabled", lambda: github.enable_auto_merge(identity)),
        ("Workflow permissions (write)", lambda: github.set_workflow_permissions(identity)),
        (f"Branch protection ({branch})", lambda: github.set_branch_protection(identity, branch)),
    ]

    results: List[Tuple[str, Optional[str]]] = []
    for name, apply in steps:
        with console.status(f"{name}..."):
            try:
                apply()
            except RuntimeError as e:
                results.append((name, str(e)))
            else:
                results.append((name, None))
    return results


def _edit_security_settings(config: SecurityConfig) -> List[str]:
    """Prompt for merge settings and extra protected paths.

    Returns:
        Protected path patterns that were added
    """
    method = click.prompt(
        "Auto-merge method",
        type=click.Choice([m.value for m in MergeMethod]),
        default=config.settings.merge_method.value,
    )
    config.settings.merge_method = MergeMethod(method)
    config.settings.audit_comments = click.confirm(
        "Add audit comments to merged PRs?", default=config.settings.audit_comments
    )
    config.settings.delete_branch = click.confirm(
        "Delete branch after merge?", default=config.settings.delete_branch
    )

    console.print("\n[bold]Additional paths to protect (require human review):[/bold]")
    extra = [
        pattern
        for label, pattern in OPTIONAL_PROTECTED_PATHS.items()
        if not config.protects(pattern) and click.confirm(f"Protect {label} ({pattern})?", default=False)
    ]
    return config.add_protected_paths(extra)


def _print_token_instructions(identity: RepositoryIdentity) -> None:
    console.print("[dim]The orchestrator needs a Personal Access Token to assign the agent to issues.[/dim]")
    console.print("[dim]The default GITHUB_TOKEN can't assign bot accounts.[/dim]\n")
    console.print("[yellow]Create a fine-grained PAT at:[/yellow]")
    console.print("  [cyan]https://github.com/settings/personal-access-tokens/new[/cyan]\n")
    console.print("[dim]Required permissions:[/dim]")
    console.print(f"[dim]  • Repository access: {identity.slug}[/dim]")
    console.print("[dim]  • Actions, Contents, Issues, Pull requests: Read and Write[/dim]\n")
    console.print("[yellow]Then add it as a repository secret:[/yellow]")
    console.print(f"  [cyan]gh secret set {AGENT_TOKEN_SECRET}[/cyan]\n")


@click.command()
@click.option("--no-input", "no_input", is_flag=True, help="Only apply GitHub settings, skip optional prompts")
def configure(no_input: bool) -> None:
    """Configure GitHub settings and security options.

    Enables auto-merge, gives workflows write permission, applies minimal
    branch protection to the default branch, then optionally edits the
    security config and stores the agent token secret.
    """
    repo_path = get_repo_path()
    header("Configuring GitHub Repository Settings")

    identity = require_repository(repo_path, require_gh=True)
    branch = get_default_branch(repo_path)
    console.print(f"[green]✓[/green] Configuring: [bold]{identity.slug}[/bold]\n")

    for name, error in _apply_repository_settings(identity, branch):
        if error is None:
            console.print(f"[green]✓[/green] {name}")
        else:
            console.print(f"[yellow]⚠ {name}: {escape(error)}[/yellow]")

    header("Security Configuration")
    try:
        config = load_security_config(repo_path)
    except ConfigError as e:
        console.print(f"[yellow]Warning: {escape(str(e))}[/yellow]")
        config = None

    if config is None:
        console.print(f"[yellow]Security config not usable ({SECURITY_CONFIG_PATH}). Run: mayor-west setup[/yellow]")
    elif not no_input and click.confirm("Would you like to configure security settings?", default=False):
        added = _edit_security_settings(config)
        save_security_config(config, repo_path)
        console.print("[green]✓ Security configuration updated[/green]")
        for pattern in added:
            console.print(f"  [dim]+ {pattern}[/dim]")

    header("Personal Access Token")
    secret = github.probe_secret(identity, AGENT_TOKEN_SECRET)
    if secret.ok and secret.value:
        console.print(f"[green]✓[/green] {AGENT_TOKEN_SECRET} secret already set")
    elif not no_input and click.confirm(f"Store the {AGENT_TOKEN_SECRET} secret now?", default=False):
        token = click.prompt("Token", hide_input=True)
        try:
            github.set_secret(identity, AGENT_TOKEN_SECRET, token)
        except RuntimeError as e:
            console.print(f"[yellow]⚠ Could not store secret: {escape(str(e))}[/yellow]")
        else:
            console.print(f"[green]✓[/green] {AGENT_TOKEN_SECRET} secret stored")
    else:
        _print_token_instructions(identity)

    console.print("[bold]Fork PR workflow approval[/bold]")
    console.print("[dim]  Settings → Actions → General → Fork pull request workflows[/dim]")
    console.print('[dim]  Select "Require approval for first-time contributors who are new to GitHub"[/dim]\n')

    console.print("[green]✓ Configuration complete! Run: mayor-west verify[/green]")


def _set_enabled(enabled: bool, commit: Optional[bool]) -> None:
    repo_path = get_repo_path()
    verb = "Resuming" if enabled else "Pausing"
    header(f"{verb} Mayor West Mode")

    try:
        changed = set_security_config_enabled(enabled, repo_path)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if changed is None:
        console.print("[red]Error: Mayor West config not found.[/red]")
        console.print("Run setup first: mayor-west setup")
        sys.exit(1)

    if not changed:
        state = "active" if enabled else "paused"
        console.print(f"[yellow]Mayor West Mode is already {state}[/yellow]")
        return

    if enabled:
        console.print("[green]✓ Mayor West Mode resumed[/green]")
        console.print("\n[green]🚀 Auto-merge is now ENABLED[/green]")
        console.print("[dim]  Agent PRs will be merged automatically (except protected paths).[/dim]")
        console.print("\nTo pause: [cyan]mayor-west pause[/cyan]")
    else:
        console.print("[green]✓ Mayor West Mode paused[/green]")
        console.print("\n[yellow]🛑 Auto-merge is now DISABLED[/yellow]")
        console.print("[dim]  Manual review is required for all PRs.[/dim]")
        console.print("\nTo resume: [cyan]mayor-west resume[/cyan]")

    if commit is None:
        commit = click.confirm("Commit this change to the repository?", default=True)
    if commit:
        message = "[MAYOR] Resume autonomous mode" if enabled else "[MAYOR] Pause autonomous mode"
        commit_files(repo_path, [SECURITY_CONFIG_PATH], message)


@click.command()
@click.option("--commit/--no-commit", default=None, help="Commit and push the change")
def pause(commit: Optional[bool]) -> None:
    """Pause autonomous mode (emergency stop for auto-merge)."""
    _set_enabled(False, commit)


@click.command()
@click.option("--commit/--no-commit", default=None, help="Commit and push the change")
def resume(commit: Optional[bool]) -> None:
    """Resume autonomous mode."""
    _set_enabled(True, commit)
