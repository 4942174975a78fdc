"""Static information commands (help, examples, version)."""

import sys

import click
from rich.table import Table

from mayorwest import __version__
from mayorwest.cli._utils import console, header

PACKAGE_NAME = "mayor-west-mode"
DESCRIPTION = "Autonomous agent development workflows for GitHub repositories"

COMMANDS = [
    ("setup", "Guided setup wizard for Mayor West Mode configuration"),
    ("verify", "Verify setup and security configuration (comprehensive checks)"),
    ("configure", "Configure GitHub settings and security options (protected paths, merge method)"),
    ("pause", "Pause autonomous mode (disable auto-merge for agent PRs)"),
    ("resume", "Resume autonomous mode (re-enable auto-merge)"),
    ("status", "Show current status including security configuration"),
    ("uninstall", "Remove the files created by setup"),
    ("policy", "Create, validate and check merge policies"),
    ("help", "Show this help message"),
    ("examples", "Show usage examples and best practices"),
    ("version", "Show version information"),
]

# (title, context, acceptance criteria)
EXAMPLE_TASKS = [
    (
        "Fix login button styling",
        "The login button looks misaligned on mobile",
        [
            "Fix button alignment on mobile (<768px)",
            "Update responsive tests",
            "Verify button works on Safari/Chrome",
        ],
    ),
    (
        "Implement dark mode toggle",
        "Users requested dark mode support for better UX at night",
        [
            "Add toggle button in settings",
            "Persist preference to localStorage",
            "Apply dark styles to all components",
            "Write tests for toggle functionality",
            "Update README with dark mode documentation",
        ],
    ),
    (
        "Add OAuth2 GitHub authentication",
        "Need to support GitHub login for seamless onboarding",
        [
            "Create /api/auth/github/callback endpoint",
            "Implement the OAuth2 flow",
            "Store user session in database",
            "Add login button to frontend",
            "Write integration tests",
            "Update security documentation",
        ],
    ),
]

BEST_PRACTICES = [
    ("Clear acceptance criteria", ["Be specific and testable", "Include all edge cases", "Avoid ambiguous requirements"]),
    ("Technical constraints", [
        "Mention existing libraries/patterns to use",
        "List files that will likely change",
        "Specify performance requirements if any",
    ]),
    ("Testing requirements", [
        "Specify minimum code coverage",
        "List types of tests needed (unit/integration)",
        "Include edge case testing",
    ]),
    ("Task complexity", [
        "Simple: 5-15 minutes (bug fixes, small features)",
        "Medium: 15-30 minutes (new endpoints, refactoring)",
        "Complex: 30-60 minutes (multi-component changes)",
    ]),
]


def show_help() -> None:
    header("Mayor West Mode CLI - Help")
    console.print("[bold cyan]Usage:[/bold cyan]")
    console.print("  [yellow]mayor-west <command> \\[options][/yellow]\n")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Command", style="yellow")
    table.add_column("Description", style="dim")
    for name, description in COMMANDS:
        table.add_row(name, description)
    console.print("[bold cyan]Commands:[/bold cyan]")
    console.print(table)

    console.print("\n[bold cyan]Security commands:[/bold cyan]")
    console.print("[dim]  setup     → Creates .github/mayor-west.yml with protected paths[/dim]")
    console.print("[dim]  configure → Modify protected paths and merge settings[/dim]")
    console.print("[dim]  verify    → Validates security config (blocked commands, protected paths)[/dim]")
    console.print("[dim]  pause     → Emergency kill switch (disables all auto-merge)[/dim]")
    console.print("[dim]  resume    → Re-enable autonomous mode[/dim]")

    console.print("\n[bold cyan]Examples:[/bold cyan]")
    console.print("[dim]  mayor-west setup[/dim]")
    console.print("[dim]  mayor-west setup --mode minimal --yes[/dim]")
    console.print("[dim]  mayor-west verify[/dim]")
    console.print("[dim]  mayor-west pause       # Emergency stop[/dim]")
    console.print("[dim]  mayor-west resume[/dim]")
    console.print("\n[dim]Run `mayor-west <command> --help` for command options.[/dim]")


@click.command("help")
def help_command() -> None:
    """Show the command overview."""
    show_help()


@click.command()
def examples() -> None:
    """Show example tasks and best practices."""
    header("Examples & Best Practices")

    for number, (title, context, criteria) in enumerate(EXAMPLE_TASKS, start=1):
        console.print(f"[bold cyan]Example {number}[/bold cyan]")
        console.print(f"[yellow][MAYOR] {title}[/yellow]\n")
        console.print(f"[dim]Context: {context}[/dim]\n")
        console.print("[dim]Acceptance Criteria:[/dim]")
        for item in criteria:
            console.print(f"[dim]- [ ] {item}[/dim]")
        console.print("")

    console.print("[bold cyan]Best Practices:[/bold cyan]\n")
    for number, (title, tips) in enumerate(BEST_PRACTICES, start=1):
        console.print(f"[yellow]{number}. {title}[/yellow]")
        for tip in tips:
            console.print(f"[dim]   - {tip}[/dim]")
        console.print("")


@click.command()
def version() -> None:
    """Show version information."""
    header("Mayor West Mode - Version Information")
    console.print(f"  [yellow]Name:[/yellow]        {PACKAGE_NAME}")
    console.print(f"  [yellow]Version:[/yellow]     {__version__}")
    console.print(f"  [yellow]Description:[/yellow] [dim]{DESCRIPTION}[/dim]")
    console.print(f"  [yellow]Python:[/yellow]      [dim]{sys.version.split()[0]}[/dim]")
    console.print("\n[cyan]  🤖 Eccentric. Autonomous. Effective.[/cyan]\n")
