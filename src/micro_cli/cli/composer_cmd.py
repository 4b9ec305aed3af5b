"""Composer commands: micro:composer:install, micro:composer:update, micro:composer:require.

Each command is a thin adapter around
:func:`micro_cli.deployment.composer_manager.run_composer`: it supplies the
composer verb, turns the parsed flags into a selection request and settings,
and maps the outcome to an exit code.
"""

import logging
import os
import sys

import click
import questionary
import yaml
from rich.markup import escape

from micro_cli.cli.styles import Messages, Styles, console, custom_style
from micro_cli.deployment.composer_manager import ComposerSettings, run_composer
from micro_cli.deployment.dispatcher import CommandVerb
from micro_cli.deployment.errors import MicroCliError
from micro_cli.deployment.selection import SelectionRequest
from micro_cli.utils.config import project_config_path
from micro_cli.utils.logger import configure_logging

from .project_utils import resolve_descriptor_path, resolve_project_path


def ask_service(names: list[str]) -> str | None:
    """Let the operator pick one service.

    Returns None when the prompt is cancelled, when stdin is not a terminal,
    or when stdin reaches EOF.
    """
    if not sys.stdin.isatty():
        return None
    try:
        return questionary.select("Select a service", choices=names, style=custom_style).ask()
    except EOFError:
        return None


def write_output(text: str) -> None:
    """Write streamed container output unmodified."""
    click.echo(text, nl=False)


def print_section(title: str) -> None:
    console.print("\n")
    console.print(Messages.header(escape(title)))
    console.print(Messages.header("-" * len(title)))


def composer_options(func):
    """Options shared by every composer command."""
    options = [
        click.option(
            "--all", "-a", "all_services", is_flag=True, help="Run for every eligible service"
        ),
        click.option(
            "--timeout",
            "-t",
            type=click.IntRange(min=0),
            default=None,
            help="Sets the process timeout (max. runtime) per service in seconds (0 = unbounded, default: 0)",
        ),
        click.option(
            "--idle-timeout",
            "-i",
            type=click.IntRange(min=0),
            default=None,
            help="Sets the process idle timeout (max. time since last output) per service in seconds (default: 30)",
        ),
        click.option(
            "--docker-executable",
            type=str,
            default=None,
            help="Sets the path to docker executable",
        ),
        click.option(
            "--project",
            "-p",
            type=click.Path(exists=True, file_okay=False, dir_okay=True),
            help="Project directory (default: current directory or MICRO_PROJECT env var)",
        ),
        click.option(
            "--descriptor",
            "-f",
            type=click.Path(dir_okay=False),
            help="Deployment descriptor (default: docker-compose.yml in project directory)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run(
    verb: CommandVerb,
    service: str | None,
    all_services: bool,
    timeout: int | None,
    idle_timeout: int | None,
    docker_executable: str | None,
    project: str | None,
    descriptor: str | None,
) -> None:
    """Shared body of all composer commands; always ends the click context."""
    ctx = click.get_current_context()

    try:
        project_path = resolve_project_path(project)
        verbose = ctx.find_root().params.get("verbose", False)
        configure_logging(
            logging.DEBUG if verbose else None, config_path=project_config_path(project_path)
        )
        settings = ComposerSettings.from_config(
            project_path,
            descriptor=resolve_descriptor_path(project_path, descriptor),
            timeout=timeout,
            idle_timeout=idle_timeout,
            docker_executable=docker_executable,
        )
        outcome = run_composer(
            verb,
            SelectionRequest.from_cli(service, all_services),
            settings,
            choose=ask_service,
            write=write_output,
            announce=print_section,
        )
    except KeyboardInterrupt:
        console.print()
        console.print(Messages.warning("Operation cancelled by user"))
        ctx.exit(130)
    except MicroCliError as e:
        console.print(Messages.error(escape(f"{e.step}: {e.message}")))
        if os.environ.get("DEBUG"):
            import traceback

            console.print(traceback.format_exc(), style=Styles.DIM)
        ctx.exit(e.exit_code)
    except (ValueError, OSError, yaml.YAMLError) as e:
        # Broken micro.yml or unreadable project directory
        console.print(Messages.error(escape(str(e))))
        ctx.exit(2)

    ctx.exit(int(outcome))


@click.command("micro:composer:install")
@click.argument("service", required=False)
@composer_options
def install(service, all_services, timeout, idle_timeout, docker_executable, project, descriptor):
    """Installs composer dependencies for services.

    Examples:

    \b
      # Pick a service interactively
      $ micro-cli micro:composer:install

      # One service, no idle limit
      $ micro-cli micro:composer:install user-service -i 0

      # Every PHP service
      $ micro-cli micro:composer:install --all
    """
    _run(
        CommandVerb.install(),
        service,
        all_services,
        timeout,
        idle_timeout,
        docker_executable,
        project,
        descriptor,
    )


@click.command("micro:composer:update")
@click.argument("service", required=False)
@composer_options
def update(service, all_services, timeout, idle_timeout, docker_executable, project, descriptor):
    """Updates composer dependencies for services.

    Examples:

    \b
      $ micro-cli micro:composer:update user-service
      $ micro-cli micro:composer:update --all --timeout 600
    """
    _run(
        CommandVerb.update(),
        service,
        all_services,
        timeout,
        idle_timeout,
        docker_executable,
        project,
        descriptor,
    )


@click.command("micro:composer:require")
@click.argument("package")
@click.argument("service", required=False)
@click.option(
    "--service", "-s", "service_option", default=None, help="Target service name (same as SERVICE)"
)
@composer_options
def require(
    package,
    service,
    service_option,
    all_services,
    timeout,
    idle_timeout,
    docker_executable,
    project,
    descriptor,
):
    """Adds a composer package to services.

    PACKAGE is a composer package spec, e.g. prooph/event-store:^7.0

    Examples:

    \b
      $ micro-cli micro:composer:require monolog/monolog user-service
      $ micro-cli micro:composer:require "guzzlehttp/guzzle:^7.0" --all
    """
    try:
        verb = CommandVerb.require(package)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="PACKAGE") from None

    if service and service_option and service != service_option:
        raise click.UsageError(
            f"Conflicting services: '{service}' and --service '{service_option}'"
        )

    _run(
        verb,
        service or service_option,
        all_services,
        timeout,
        idle_timeout,
        docker_executable,
        project,
        descriptor,
    )
