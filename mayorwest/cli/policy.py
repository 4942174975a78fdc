"""Policy file commands (policy init, validate, check)."""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.markup import escape

from mayorwest.cli._utils import console, get_repo_path
from mayorwest.content import POLICY_HEADER
from mayorwest.policy import (
    POLICY_FILE_PATH,
    ChangedFile,
    PolicyError,
    Policies,
    check_bypass,
    generate_default_policy,
    parse_policy_file,
    validate_commit_message,
    validate_files,
)


def _policy_path(path: Optional[str]) -> Path:
    return Path(path) if path else get_repo_path() / POLICY_FILE_PATH


def _parse_changed_file(value: str) -> ChangedFile:
    """Parse PATH or PATH:ADDITIONS:DELETIONS."""
    parts = value.rsplit(":", 2)
    if len(parts) == 3 and parts[1].isdigit() and parts[2].isdigit():
        return ChangedFile(parts[0], additions=int(parts[1]), deletions=int(parts[2]))
    return ChangedFile(value)


@click.group()
def policy() -> None:
    """Manage merge policies (.github/mayor-west-policies.yml)."""
    pass


@policy.command("init")
@click.option("--strict", is_flag=True, help="Smaller PRs, block workflows, manifests and migrations")
@click.option(
    "--category",
    "categories",
    multiple=True,
    type=click.Choice(list(Policies.model_fields)),
    help="Only include these policy categories (repeatable)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing policy file")
def policy_init(strict: bool, categories: Tuple[str, ...], force: bool) -> None:
    """Create a default policy file."""
    path = _policy_path(None)
    if path.exists() and not force:
        console.print(f"[yellow]Policy file already exists: {POLICY_FILE_PATH}[/yellow]")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        sys.exit(1)

    content = POLICY_HEADER + generate_default_policy(strict=strict, categories=categories or None)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    console.print(f"[green]✓ Created {POLICY_FILE_PATH}[/green]")


@policy.command("validate")
@click.argument("path", required=False)
def policy_validate(path: Optional[str]) -> None:
    """Check that a policy file parses and matches the schema."""
    policy_path = _policy_path(path)
    try:
        parsed = parse_policy_file(policy_path)
    except PolicyError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ {path or POLICY_FILE_PATH} is valid[/green]")
    if not parsed.enabled:
        console.print("[yellow]Policies are disabled (enabled: false)[/yellow]")
    for name in Policies.model_fields:
        state = "defined" if getattr(parsed.policies, name) is not None else "not set"
        console.print(f"  [dim]{name}: {state}[/dim]")


@policy.command("check")
@click.option("--file", "files", multiple=True, help="Changed file, as PATH or PATH:ADDITIONS:DELETIONS (repeatable)")
@click.option("--message", "-m", help="Commit message to validate")
@click.option("--label", "labels", multiple=True, help="Issue label (repeatable)")
@click.option("--policy-file", help="Policy file (default: .github/mayor-west-policies.yml)")
def policy_check(
    files: Tuple[str, ...],
    message: Optional[str],
    labels: Tuple[str, ...],
    policy_file: Optional[str],
) -> None:
    """Evaluate changed files and a commit message against the policy.

    Example:
        mayor-west policy check --file src/app.py:10:2 -m "[MAYOR] Fix the login form" --label hotfix
    """
    try:
        parsed = parse_policy_file(_policy_path(policy_file))
    except PolicyError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    bypass = check_bypass(list(labels), parsed)
    if bypass.bypass_type == "full":
        console.print("[yellow]All policies bypassed by label[/yellow]")
        return
    if bypass.has_bypass:
        console.print(f"[yellow]Bypassed by label: {', '.join(bypass.bypasses)}[/yellow]")

    violations = []
    if files and "files" not in bypass.bypasses:
        result = validate_files([_parse_changed_file(f) for f in files], parsed)
        violations.extend(result.violations)
    if message is not None and "commits" not in bypass.bypasses:
        result = validate_commit_message(message, parsed)
        violations.extend(result.violations)

    if violations:
        for violation in violations:
            console.print(f"[red]✗[/red] {escape(violation)}")
        sys.exit(1)

    console.print("[green]✓ All policy checks passed[/green]")
