"""Setup commands (setup, uninstall)."""

from typing import List, Optional

import click
from rich.markup import escape
from rich.table import Table

from mayorwest.cli._utils import commit_files, console, get_repo_path, header, require_repository
from mayorwest.content import AGENT_TOKEN_SECRET
from mayorwest.remote import resolve_repository
from mayorwest.sync import (
    SetupMode,
    WritePlanEntry,
    entry_status,
    execute_plan,
    filesystem_oracle,
    partition_scaffold,
    plan_sync,
    remove_scaffold,
    select_paths,
)
from mayorwest.templates import (
    DEFAULT_ITERATION_LIMIT,
    MAX_ITERATION_LIMIT,
    MIN_ITERATION_LIMIT,
    MergeStrategy,
    RenderOptions,
    TemplateRegistry,
    default_registry,
)

SETUP_COMMIT_MESSAGE = "[MAYOR] Add autonomous workflows"
UNINSTALL_COMMIT_MESSAGE = "[MAYOR] Remove autonomous workflows"

MODE_DESCRIPTIONS = {
    SetupMode.FULL: "all files + configuration",
    SetupMode.MINIMAL: "core files only",
    SetupMode.CUSTOM: "choose files individually",
}

STRATEGY_DESCRIPTIONS = {
    MergeStrategy.SQUASH: "recommended",
    MergeStrategy.MERGE: "preserve commits",
    MergeStrategy.REBASE: "linear history",
}


def _ask_mode(mode: Optional[str], yes: bool) -> SetupMode:
    if mode:
        return SetupMode(mode)
    if yes:
        return SetupMode.FULL
    for choice, description in MODE_DESCRIPTIONS.items():
        console.print(f"  [cyan]{choice.value}[/cyan] - {description}")
    answer = click.prompt(
        "Which setup mode would you like?",
        type=click.Choice([m.value for m in SetupMode]),
        default=SetupMode.FULL.value,
    )
    return SetupMode(answer)


def _ask_strategy(strategy: Optional[str], yes: bool) -> MergeStrategy:
    if strategy:
        return MergeStrategy(strategy.upper())
    if yes:
        return MergeStrategy.SQUASH
    for choice, description in STRATEGY_DESCRIPTIONS.items():
        console.print(f"  [cyan]{choice.value}[/cyan] - {description}")
    answer = click.prompt(
        "How should PRs be merged?",
        type=click.Choice([s.value for s in MergeStrategy], case_sensitive=False),
        default=MergeStrategy.SQUASH.value,
    )
    return MergeStrategy(answer.upper())


def _ask_custom_paths(registry: TemplateRegistry, yes: bool) -> List[str]:
    chosen = []
    for descriptor in registry.list_all():
        if yes:
            wanted = descriptor.critical
        else:
            wanted = click.confirm(f"Create {descriptor.display_name}?", default=descriptor.critical)
        if wanted:
            chosen.append(descriptor.path)
    return chosen


def _print_plan(plan: List[WritePlanEntry], repo_path) -> None:
    table = Table(title="Planned changes (dry run)")
    table.add_column("File", style="cyan")
    table.add_column("Action")

    styles = {"create": "green", "overwrite": "yellow", "unchanged": "dim"}
    for entry in plan:
        status = entry_status(entry, repo_path)
        table.add_row(entry.path, f"[{styles[status]}]{status}[/{styles[status]}]")

    console.print(table)
    console.print("[dim]Nothing was written.[/dim]")


def _print_next_steps(identity_slug: str, written: List[str]) -> None:
    console.print("\n[bold cyan]Next steps:[/bold cyan]")
    console.print("1. Review the generated files:")
    for path in written:
        console.print(f"   [dim]{path}[/dim]")
    console.print("\n2. Configure GitHub repository settings:")
    console.print("   [yellow]mayor-west configure[/yellow]")
    console.print("   [dim]Sets up auto-merge, workflow permissions and branch protection.[/dim]")
    console.print("\n3. Create a Personal Access Token for the orchestrator:")
    console.print("   [dim]https://github.com/settings/personal-access-tokens/new[/dim]")
    console.print(f"   [dim]Repository access: {identity_slug}[/dim]")
    console.print("   [dim]Permissions: Actions, Contents, Issues, Pull requests (read + write)[/dim]")
    console.print(f"   [cyan]gh secret set {AGENT_TOKEN_SECRET}[/cyan]")
    console.print("\n4. Commit and push, then run the orchestrator once:")
    console.print("   [dim]GitHub → Actions → Mayor West Orchestrator → Run workflow[/dim]")
    console.print("\n5. Create your first task:")
    console.print("   [dim]GitHub → Issues → New → Mayor Task[/dim]")


@click.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in SetupMode]),
    help="Which files to create (prompted if omitted)",
)
@click.option(
    "--merge-strategy",
    type=click.Choice([s.value for s in MergeStrategy], case_sensitive=False),
    help="How agent pull requests are merged",
)
@click.option(
    "--iteration-limit",
    type=click.IntRange(MIN_ITERATION_LIMIT, MAX_ITERATION_LIMIT),
    help="Max agent iterations before stopping",
)
@click.option("--auto-merge/--no-auto-merge", default=None, help="Enable auto-merge of agent PRs")
@click.option("--yes", "-y", is_flag=True, help="Use defaults instead of prompting")
@click.option("--dry-run", is_flag=True, help="Show what would be written without writing")
@click.option("--commit/--no-commit", default=None, help="Commit and push the generated files")
def setup(
    mode: Optional[str],
    merge_strategy: Optional[str],
    iteration_limit: Optional[int],
    auto_merge: Optional[bool],
    yes: bool,
    dry_run: bool,
    commit: Optional[bool],
) -> None:
    """Guided setup wizard for Mayor West Mode.

    Writes editor settings, workflows, the task issue template and agent
    instructions into the current repository. Re-running overwrites the
    generated files with fresh content.

    Example:
        mayor-west setup --mode minimal --yes
    """
    repo_path = get_repo_path()
    header("Mayor West Mode Setup")

    identity = require_repository(repo_path)
    console.print("[green]✓[/green] Git repository detected")
    console.print(f"[green]✓[/green] GitHub repository: [bold]{identity.slug}[/bold]\n")

    registry = default_registry()

    setup_mode = _ask_mode(mode, yes)
    if auto_merge is None:
        auto_merge = True if yes else click.confirm("Enable auto-merge on PRs?", default=True)
    strategy = _ask_strategy(merge_strategy, yes)
    if iteration_limit is None:
        if yes:
            iteration_limit = DEFAULT_ITERATION_LIMIT
        else:
            iteration_limit = click.prompt(
                "Max agent iterations before stopping",
                type=click.IntRange(MIN_ITERATION_LIMIT, MAX_ITERATION_LIMIT),
                default=DEFAULT_ITERATION_LIMIT,
            )

    custom_paths = _ask_custom_paths(registry, yes) if setup_mode == SetupMode.CUSTOM else None
    selected = select_paths(registry, setup_mode, custom_paths)
    if not selected:
        console.print("[yellow]No files selected, nothing to do.[/yellow]")
        return

    options = RenderOptions(
        owner=identity.owner,
        repo=identity.repo,
        iteration_limit=iteration_limit,
        merge_strategy=strategy,
        auto_merge=auto_merge,
    )
    plan = plan_sync(selected, options, filesystem_oracle(repo_path), registry)

    if dry_run:
        _print_plan(plan, repo_path)
        return

    header("Creating Configuration Files")

    def on_result(entry: WritePlanEntry, error: Optional[str]) -> None:
        name = registry.get(entry.path).display_name
        if error is None:
            verb = "Updated" if entry.already_exists else "Created"
            console.print(f"[green]✓[/green] {verb} {name} [dim]({entry.path})[/dim]")
        else:
            console.print(f"[red]✗[/red] {name}: {escape(error)}")

    report = execute_plan(plan, repo_path, on_result=on_result)

    console.print(f"\n[bold]Created {report.created} configuration file(s)[/bold]")
    if report.failed:
        console.print(f"[yellow]{len(report.failed)} file(s) could not be written; re-run setup after fixing them.[/yellow]")

    failed_paths = {f.path for f in report.failed}
    written = [entry.path for entry in plan if entry.path not in failed_paths]

    if commit is None:
        commit = False if yes else click.confirm("Commit and push the generated files?", default=False)
    if commit and written:
        commit_files(repo_path, written, SETUP_COMMIT_MESSAGE)

    header("Setup Complete")
    _print_next_steps(identity.slug, written)


@click.command()
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
@click.option("--commit/--no-commit", default=False, help="Commit and push the removal")
def uninstall(yes: bool, commit: bool) -> None:
    """Remove the files created by setup.

    Files at setup's paths that were edited or written by hand are left in
    place and listed as skipped.
    """
    repo_path = get_repo_path()
    header("Uninstall Mayor West Mode")

    registry = default_registry()
    identity = resolve_repository(repo_path)
    owned, foreign = partition_scaffold(registry.paths(), repo_path, registry, identity)

    for path in foreign:
        console.print(f"[yellow]Skipping {path} (not generated by mayor-west or edited since)[/yellow]")
    if not owned:
        console.print("[green]Nothing to remove: no Mayor West files found.[/green]")
        return

    console.print("[bold]These files will be deleted:[/bold]")
    for path in owned:
        console.print(f"  • {path}")
    console.print("")

    if not yes and not click.confirm("Delete these files?", default=False):
        console.print("[yellow]Aborted.[/yellow]")
        return

    def on_result(path: str, error: Optional[str]) -> None:
        if error is None:
            console.print(f"[green]✓[/green] Removed {path}")
        else:
            console.print(f"[red]✗[/red] {path}: {escape(error)}")

    report = remove_scaffold(owned, repo_path, on_result=on_result)
    console.print(f"\n[bold]Removed {report.removed} file(s)[/bold]")

    if commit and report.removed:
        removed = [path for path in owned if not (repo_path / path).exists()]
        commit_files(repo_path, removed, UNINSTALL_COMMIT_MESSAGE)

    if report.failed:
        console.print(f"[yellow]{len(report.failed)} file(s) could not be removed.[/yellow]")
