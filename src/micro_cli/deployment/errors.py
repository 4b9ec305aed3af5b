"""Exception hierarchy for service discovery and composer dispatch.

All exceptions inherit from MicroCliError so the CLI can report any
domain failure with one handler. Each one names the step that failed.
"""

from enum import IntEnum


class ExitOutcome(IntEnum):
    """Process exit codes for a composer run.

    Attributes:
        SUCCESS: Every selected service finished with status zero
        NO_ELIGIBLE_SERVICES: Nothing to do; reported as a warning, not a fault
        FAILURE: Fatal setup error or a dispatch failure without its own status
    """

    SUCCESS = 0
    NO_ELIGIBLE_SERVICES = 1
    FAILURE = 2


class MicroCliError(Exception):
    """Base exception for all micro CLI errors.

    Attributes:
        message: Human-readable error description
        step: Pipeline step that failed (descriptor, runtime, selection, dispatch)
    """

    step = "micro"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def exit_code(self) -> int:
        return int(ExitOutcome.FAILURE)


class DescriptorError(MicroCliError):
    """Deployment descriptor is missing, unreadable, or has no services section."""

    step = "descriptor"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class RuntimeNotFoundError(MicroCliError):
    """Container runtime executable could not be located on PATH."""

    step = "runtime"

    def __init__(self, runtime_name: str = "docker") -> None:
        super().__init__(
            f"Could not detect {runtime_name} executable. "
            "Please provide it with --docker-executable option."
        )
        self.runtime_name = runtime_name


class InvalidSelectionError(MicroCliError):
    """Requested service does not resolve to an eligible service."""

    step = "selection"

    def __init__(self, message: str = "Invalid service name provided.", service: str | None = None):
        super().__init__(message)
        self.service = service


class DispatchFailure(MicroCliError):
    """A containerized composer run exited non-zero or was killed by a timeout.

    Attributes:
        service: Service whose run failed
        exit_status: Subprocess exit status, or None when it never exited on its own
        reason: Short description (exit status, timeout kind, spawn error)
    """

    step = "dispatch"

    def __init__(self, service: str, exit_status: int | None, reason: str) -> None:
        super().__init__(f"composer failed for service '{service}': {reason}")
        self.service = service
        self.exit_status = exit_status
        self.reason = reason

    @property
    def exit_code(self) -> int:
        if isinstance(self.exit_status, int) and self.exit_status > 0:
            return self.exit_status
        return int(ExitOutcome.FAILURE)
