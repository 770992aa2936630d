"""Main CLI entry point for taskboard management commands."""

import click

from taskboard import __version__
from taskboard.cli.commands import email, queue, server, users
from taskboard.core.settings import get_logging_settings
from taskboard.infra.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Taskboard CLI - management commands for the task service.

    \b
    Command Groups:
      email      Email transport status and test sends
      queue      Notification queue inspection and workers
      users      Demo data and user listing
      server     Run the API server

    \b
    Quick Start:
      taskboard users seed
      taskboard email test --dry-run
      taskboard queue work
    """
    ctx.ensure_object(dict)


cli.add_command(email.email)
cli.add_command(queue.queue)
cli.add_command(users.users)
cli.add_command(server.server)


def main() -> None:
    """Entry point for CLI."""
    setup_logging(log_settings=get_logging_settings())
    cli(obj={})


if __name__ == "__main__":
    main()
