"""Composer Command Orchestration.

Ties the pipeline together for one CLI invocation::

    descriptor -> discovery -> selection -> runtime lookup -> dispatch

Key Features:
    - Services re-read from docker-compose.yml on every call (no state kept)
    - Eligibility by base image and composer.json presence
    - Single, all, or interactive service targeting
    - Sequential containerized composer runs with total and idle timeouts
    - Fail-fast: the first failing service stops the run

Examples:
    Install dependencies for every PHP service::

        >>> settings = ComposerSettings.from_config(project_dir)
        >>> run_composer(
        ...     CommandVerb.install(),
        ...     SelectionRequest.from_cli(None, all_services=True),
        ...     settings,
        ...     choose=ask_service,
        ...     write=print_raw,
        ...     announce=print_section,
        ... )
        <ExitOutcome.SUCCESS: 0>

.. seealso::
   :mod:`micro_cli.cli.composer_cmd` : CLI adapters calling :func:`run_composer`
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from micro_cli.deployment.descriptor import load_descriptor
from micro_cli.deployment.discovery import discover_services
from micro_cli.deployment.dispatcher import (
    DEFAULT_COMPOSER_IMAGE,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_MOUNT_PATH,
    DEFAULT_TIMEOUT,
    CommandVerb,
    ProcessDispatcher,
    build_jobs,
)
from micro_cli.deployment.errors import ExitOutcome
from micro_cli.deployment.runtime_helper import RuntimeResolver, get_runtime_name
from micro_cli.deployment.selection import Chooser, SelectionRequest, select_services
from micro_cli.utils.config import get_config_builder, project_config_path
from micro_cli.utils.logger import get_logger

logger = get_logger("dispatcher")

NO_SERVICES_MESSAGE = (
    "No php services declared in docker-compose.yml or no composer.json files found. Aborting"
)


@dataclass
class ComposerSettings:
    """Everything a composer run needs besides the verb and the selection."""

    project_dir: Path
    descriptor_path: Path
    service_root: Path
    base_image: str = "prooph/php"
    composer_image: str = DEFAULT_COMPOSER_IMAGE
    manifest: str = "composer.json"
    mount_path: str = DEFAULT_MOUNT_PATH
    timeout: int = DEFAULT_TIMEOUT
    idle_timeout: int = DEFAULT_IDLE_TIMEOUT
    docker_executable: str | None = None
    runtime_name: str = "docker"

    @classmethod
    def from_config(
        cls,
        project_dir: str | Path,
        descriptor: str | Path | None = None,
        config_path: str | Path | None = None,
        **overrides,
    ) -> "ComposerSettings":
        """Build settings from micro.yml (``config_path``, then MICRO_CONFIG, then the project).

        ``overrides`` with a value of None are ignored so unset CLI options
        keep the configured value.
        """
        project_dir = Path(project_dir)
        config = get_config_builder(project_config_path(project_dir, config_path))

        descriptor_path = Path(descriptor or config.get("project.descriptor"))
        if not descriptor_path.is_absolute():
            descriptor_path = project_dir / descriptor_path

        settings = cls(
            project_dir=project_dir,
            descriptor_path=descriptor_path,
            service_root=project_dir / config.get("project.service_dir"),
            base_image=config.get("composer.base_image"),
            composer_image=config.get("composer.image"),
            manifest=config.get("composer.manifest"),
            mount_path=config.get("composer.mount_path"),
            timeout=int(config.get("composer.timeout")),
            idle_timeout=int(config.get("composer.idle_timeout")),
            runtime_name=get_runtime_name(config.get("container_runtime")),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(settings, key, value)
        return settings


def run_composer(
    command: CommandVerb,
    request: SelectionRequest,
    settings: ComposerSettings,
    choose: Chooser,
    write: Callable[[str], None],
    announce: Callable[[str], None],
    runner: Callable[..., int] | None = None,
) -> ExitOutcome:
    """Run a composer command against the targeted services.

    Args:
        command: Composer verb to run
        request: Which services the operator targets
        settings: Project paths, images and timeouts
        choose: Interactive chooser used when no valid name was given
        write: Sink for streamed container output
        announce: Sink for per-service section headers
        runner: Optional process runner (defaults to :func:`run_streaming`)

    Returns:
        ExitOutcome.SUCCESS, or ExitOutcome.NO_ELIGIBLE_SERVICES when there is nothing to do

    Raises:
        DescriptorError: Descriptor missing or malformed
        InvalidSelectionError: Selection does not resolve to an eligible service
        RuntimeNotFoundError: Container runtime not found
        DispatchFailure: A service's composer run failed; later services were skipped
    """
    declared = load_descriptor(settings.descriptor_path)
    eligible = discover_services(
        declared,
        settings.service_root,
        base_image=settings.base_image,
        manifest=settings.manifest,
    )

    if not eligible:
        logger.warning(NO_SERVICES_MESSAGE)
        return ExitOutcome.NO_ELIGIBLE_SERVICES

    selected = select_services(request, eligible, choose)
    logger.info(f"composer {command.name} for: {', '.join(selected)}")

    resolver = RuntimeResolver(settings.docker_executable, settings.runtime_name)
    runtime_executable = resolver.resolve()

    dispatcher = ProcessDispatcher(write=write, announce=announce)
    if runner is not None:
        dispatcher.runner = runner

    jobs = build_jobs(
        selected,
        command,
        runtime_executable,
        timeout_seconds=settings.timeout,
        idle_timeout_seconds=settings.idle_timeout,
        image=settings.composer_image,
        mount_path=settings.mount_path,
    )
    outcome = dispatcher.run_all(jobs)
    logger.success(f"composer {command.name} finished for {len(selected)} service(s)")
    return outcome
