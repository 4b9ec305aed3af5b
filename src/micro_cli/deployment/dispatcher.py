"""Sequential, fail-fast dispatch of containerized composer commands.

Each selected service gets one short-lived container::

    docker run --rm --env COMPOSER_ALLOW_SUPERUSER=1 \\
        --volume <service dir>:/app:rw prooph/composer:<php version> \\
        <verb> [args] --no-interaction --no-suggest

Jobs run one at a time in selection order. The first failure stops the run.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from micro_cli.deployment.discovery import EligibleService
from micro_cli.deployment.errors import DispatchFailure, ExitOutcome
from micro_cli.deployment.process_runner import ProcessTimedOut, run_streaming
from micro_cli.utils.logger import get_logger

logger = get_logger("dispatcher")

DEFAULT_COMPOSER_IMAGE = "prooph/composer"
DEFAULT_MOUNT_PATH = "/app"
DEFAULT_TIMEOUT = 0
DEFAULT_IDLE_TIMEOUT = 30

COMPOSER_ENV = "COMPOSER_ALLOW_SUPERUSER=1"
COMPOSER_FLAGS = ("--no-interaction", "--no-suggest")

# Exit status reported when the runtime executable cannot be started
SPAWN_FAILURE_STATUS = 127


@dataclass(frozen=True)
class CommandVerb:
    """A composer verb with its positional arguments."""

    name: str
    arguments: tuple[str, ...] = ()

    @classmethod
    def install(cls) -> "CommandVerb":
        return cls("install")

    @classmethod
    def update(cls) -> "CommandVerb":
        return cls("update")

    @classmethod
    def require(cls, package_spec: str) -> "CommandVerb":
        spec = package_spec.strip()
        if not spec:
            raise ValueError("composer require needs a non-empty package spec")
        return cls("require", (spec,))

    def __str__(self) -> str:
        return " ".join((self.name, *self.arguments))


@dataclass(frozen=True)
class DispatchJob:
    """One composer run against one service."""

    service: EligibleService
    command: CommandVerb
    runtime_executable: str
    timeout_seconds: int = DEFAULT_TIMEOUT
    idle_timeout_seconds: int = DEFAULT_IDLE_TIMEOUT
    image: str = DEFAULT_COMPOSER_IMAGE
    mount_path: str = DEFAULT_MOUNT_PATH

    def __post_init__(self):
        if self.timeout_seconds < 0 or self.idle_timeout_seconds < 0:
            raise ValueError("Timeouts must be >= 0 (0 means unbounded)")

    def build_command(self) -> list[str]:
        """Build the ``docker run`` argument vector for this job."""
        return [
            self.runtime_executable,
            "run",
            "--rm",
            "--env",
            COMPOSER_ENV,
            "--volume",
            f"{self.service.directory}:{self.mount_path}:rw",
            f"{self.image}:{self.service.tool_version_tag}",
            self.command.name,
            *self.command.arguments,
            *COMPOSER_FLAGS,
        ]


@dataclass
class ProcessDispatcher:
    """Runs dispatch jobs one after another, stopping at the first failure.

    Attributes:
        write: Sink for streamed subprocess output
        announce: Called with the section title before each job starts
        runner: Process execution function, see :func:`run_streaming`
    """

    write: Callable[[str], None]
    announce: Callable[[str], None]
    runner: Callable[..., int] = field(default=run_streaming)

    def run_job(self, job: DispatchJob) -> None:
        """Run a single job.

        Raises:
            DispatchFailure: If the container exits non-zero, times out, or cannot start
        """
        service = job.service.name
        self.announce(f"Run `composer {job.command}` for service {service}")

        cmd = job.build_command()
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            status = self.runner(
                cmd,
                self.write,
                timeout=job.timeout_seconds,
                idle_timeout=job.idle_timeout_seconds,
            )
        except ProcessTimedOut as e:
            raise DispatchFailure(service, None, f"process {e}") from e
        except OSError as e:
            raise DispatchFailure(
                service, SPAWN_FAILURE_STATUS, f"cannot run {job.runtime_executable}: {e}"
            ) from e

        if status != 0:
            raise DispatchFailure(service, status, f"exit status {status}")

        logger.debug(f"composer {job.command.name} finished for {service}")

    def run_all(self, jobs: Iterable[DispatchJob]) -> ExitOutcome:
        """Run jobs in the given order.

        Jobs are consumed lazily, so a generator building each job right
        before it runs never builds jobs after a failure.

        Returns:
            ExitOutcome.SUCCESS when every job exits with status zero

        Raises:
            DispatchFailure: For the first failing job; later jobs never start
        """
        for job in jobs:
            self.run_job(job)
        return ExitOutcome.SUCCESS


def build_jobs(
    selected: dict[str, EligibleService],
    command: CommandVerb,
    runtime_executable: str,
    timeout_seconds: int = DEFAULT_TIMEOUT,
    idle_timeout_seconds: int = DEFAULT_IDLE_TIMEOUT,
    image: str = DEFAULT_COMPOSER_IMAGE,
    mount_path: str = DEFAULT_MOUNT_PATH,
):
    """Yield one job per selected service, in mapping order, built on demand."""
    for service in selected.values():
        yield DispatchJob(
            service=service,
            command=command,
            runtime_executable=runtime_executable,
            timeout_seconds=timeout_seconds,
            idle_timeout_seconds=idle_timeout_seconds,
            image=image,
            mount_path=mount_path,
        )
