"""Main CLI entry point for micro CLI.

This module provides the main CLI group that organizes all commands under
the `micro-cli` command namespace. Commands are imported only when invoked
so `micro-cli --help` stays fast.
"""

import logging
import sys

import click

from micro_cli import __version__


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    # Command name -> (module path, attribute)
    commands_map = {
        "micro:composer:install": ("micro_cli.cli.composer_cmd", "install"),
        "micro:composer:update": ("micro_cli.cli.composer_cmd", "update"),
        "micro:composer:require": ("micro_cli.cli.composer_cmd", "require"),
    }

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in self.commands_map:
            return None

        import importlib

        module_path, attribute = self.commands_map[cmd_name]
        mod = importlib.import_module(module_path)
        return getattr(mod, attribute)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(self.commands_map)


@click.group(cls=LazyGroup)
@click.version_option(version=__version__, prog_name="micro-cli")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose):
    """Micro CLI - composer for the PHP services of a compose deployment.

    Runs composer inside a short-lived prooph/composer container for each
    PHP service declared in docker-compose.yml.

    Examples:

    \b
      micro-cli micro:composer:install --all
      micro-cli micro:composer:update user-service
      micro-cli micro:composer:require monolog/monolog user-service
    """
    from micro_cli.utils.logger import configure_logging

    configure_logging(logging.DEBUG if verbose else None)


def main():
    """Entry point for the micro-cli console script."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nAborted.", err=True)
        sys.exit(130)
    except Exception as e:
        from micro_cli.deployment.errors import ExitOutcome

        # Exit status 1 means "no eligible services"
        click.echo(f"Error: {e}", err=True)
        sys.exit(int(ExitOutcome.FAILURE))


if __name__ == "__main__":
    main()
