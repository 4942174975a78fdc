"""Read-only commands (verify, status)."""

import click
from rich.markup import escape
from rich.table import Table

from mayorwest.checks import build_verify_checks
from mayorwest.cli._utils import console, get_repo_path, header
from mayorwest.config import ConfigError, load_security_config
from mayorwest.git_utils import get_current_branch, get_remote_url, is_git_repository
from mayorwest.github import is_gh_authenticated, is_gh_installed
from mayorwest.templates import default_registry


@click.command()
def verify() -> None:
    """Verify setup and security configuration.

    Prints a scorecard of file, git, GitHub and security checks. Nothing is
    changed; failed checks include a hint on how to fix them.
    """
    repo_path = get_repo_path()
    header("Verifying Setup")

    with console.status("Running checks..."):
        results = build_verify_checks(repo_path, default_registry()).run_all()

    passed = 0
    for result in results:
        if result.passed:
            passed += 1
            console.print(f"[green]✓[/green] {result.name}")
        else:
            console.print(f"[red]✗[/red] {result.name}")
            if result.message:
                console.print(f"  [dim]{escape(result.message)}[/dim]")
            if result.fix_hint:
                for line in result.fix_hint.splitlines():
                    console.print(f"  [dim]→ {escape(line)}[/dim]")

    total = len(results)
    console.print(f"\nResult: [bold]{passed}/{total}[/bold] checks passed\n")

    if passed == total:
        console.print("[bold green]All systems go! 🚀[/bold green]")
        console.print("Next: create a task and trigger the orchestrator workflow.")
    else:
        console.print("[yellow]Some checks failed. See the hints above for fixes.[/yellow]")
        if not is_gh_installed() or not is_gh_authenticated():
            console.print("[dim]Install and authenticate the GitHub CLI to enable the GitHub settings checks.[/dim]")


@click.command()
def status() -> None:
    """Show repository, file and autonomous mode status."""
    repo_path = get_repo_path()
    header("Mayor West Mode Status")

    is_git = is_git_repository(repo_path)
    console.print("[cyan]Repository Information:[/cyan]")
    console.print(f"  Git repository: {'[green]✓[/green]' if is_git else '[red]✗[/red]'}")
    console.print(f"  Remote URL: {escape(get_remote_url(repo_path) or 'N/A')}")
    console.print(f"  Current branch: {escape(get_current_branch(repo_path) or 'N/A')}\n")

    table = Table(title="Configuration Files")
    table.add_column("", width=2)
    table.add_column("File", style="cyan")
    table.add_column("Path", style="dim")
    for descriptor in default_registry().list_all():
        exists = (repo_path / descriptor.path).exists()
        table.add_row("[green]✓[/green]" if exists else "[red]✗[/red]", descriptor.display_name, descriptor.path)
    console.print(table)

    try:
        config = load_security_config(repo_path)
    except ConfigError as e:
        console.print(f"\n[red]⚠ Could not read security config: {escape(str(e))}[/red]")
        return

    if config is None:
        console.print("\n[dim]No security config. Run: mayor-west setup[/dim]")
        return

    console.print("\n[cyan]Security Configuration:[/cyan]")
    if config.enabled:
        console.print("  [green]🚀 Autonomous mode: ACTIVE[/green]")
        console.print("  [dim]Agent PRs will auto-merge (except protected paths)[/dim]")
    else:
        console.print("  [yellow]🛑 Autonomous mode: PAUSED[/yellow]")
        console.print("  [dim]All PRs require manual review[/dim]")
    console.print(f"  🛡️  Protected paths: {len(config.protected_paths)} patterns defined")
    console.print(f"  Merge method: {config.settings.merge_method.value}")
