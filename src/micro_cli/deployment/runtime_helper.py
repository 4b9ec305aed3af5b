"""Container runtime executable lookup for Docker and Podman.

Examples:
    Basic usage::

        from micro_cli.deployment.runtime_helper import RuntimeResolver

        resolver = RuntimeResolver(explicit_path=None)
        docker = resolver.resolve()
        # Returns: '/usr/bin/docker'
"""

import os
import shutil

from micro_cli.deployment.errors import RuntimeNotFoundError
from micro_cli.utils.logger import get_logger

logger = get_logger("runtime")

SUPPORTED_RUNTIMES = ("docker", "podman")
DEFAULT_RUNTIME = "docker"


def get_runtime_name(configured: str | None = None) -> str:
    """Pick the runtime binary name to search for.

    Checks CONTAINER_RUNTIME env var, then the configured value; anything
    unsupported (including 'auto') falls back to docker.

    Args:
        configured: Value of ``container_runtime`` from micro.yml

    Returns:
        'docker' or 'podman'
    """
    runtime = os.getenv("CONTAINER_RUNTIME") or configured
    if runtime and runtime.lower() in SUPPORTED_RUNTIMES:
        return runtime.lower()
    return DEFAULT_RUNTIME


class RuntimeResolver:
    """Resolves the container runtime executable once per invocation.

    An explicit path is returned as given; existence is only checked when the
    dispatcher spawns it. Otherwise PATH is searched once and the result kept
    on this instance.
    """

    def __init__(self, explicit_path: str | None = None, runtime_name: str | None = None):
        self.explicit_path = explicit_path
        self.runtime_name = runtime_name or get_runtime_name()
        self._resolved: str | None = None

    def resolve(self) -> str:
        """Return the runtime executable path.

        Raises:
            RuntimeNotFoundError: If no path was given and the runtime is not on PATH
        """
        if self.explicit_path is not None:
            return self.explicit_path

        if self._resolved is None:
            found = shutil.which(self.runtime_name)
            if found is None:
                raise RuntimeNotFoundError(self.runtime_name)
            logger.debug(f"Using {self.runtime_name} executable at {found}")
            self._resolved = found

        return self._resolved
