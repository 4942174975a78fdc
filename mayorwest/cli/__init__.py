"""CLI for Mayor West Mode."""

import logging

import click
from rich.markup import escape

from mayorwest import __version__
from mayorwest.cli._utils import console

log = logging.getLogger("mayorwest.cli")


class MayorWestGroup(click.Group):
    """Command group that reports unknown commands and unhandled errors with exit code 1."""

    def resolve_command(self, ctx: click.Context, args: list):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            console.print(f"[red]Unknown command: {escape(args[0])}[/red]\n")
            from mayorwest.cli.info import show_help

            show_help()
            ctx.exit(1)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (click.exceptions.Exit, click.exceptions.Abort, click.ClickException):
            raise
        except Exception as e:
            log.debug("Unhandled error", exc_info=True)
            console.print(f"[red]✗ Error: {escape(str(e))}[/red]")
            ctx.exit(1)


@click.group(cls=MayorWestGroup, invoke_without_command=True)
@click.version_option(__version__, "-v", "--version", message="%(version)s")
@click.option("--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Mayor West Mode: autonomous agent workflows for GitHub repositories.

    Sets up workflows and settings so an AI coding agent picks up labelled
    issues and its pull requests merge automatically.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is None:
        from mayorwest.cli.info import show_help

        show_help()


# Import and register command modules
from mayorwest.cli import configure  # noqa: E402
from mayorwest.cli import info  # noqa: E402
from mayorwest.cli import policy  # noqa: E402
from mayorwest.cli import setup  # noqa: E402
from mayorwest.cli import verify  # noqa: E402

# Setup commands
main.add_command(setup.setup)
main.add_command(setup.uninstall)

# Read-only commands
main.add_command(verify.verify)
main.add_command(verify.status)

# Repository configuration commands
main.add_command(configure.configure)
main.add_command(configure.pause)
main.add_command(configure.resume)

# Policy group
main.add_command(policy.policy)

# Static information
main.add_command(info.help_command)
main.add_command(info.examples)
main.add_command(info.version)

__all__ = ["main"]
