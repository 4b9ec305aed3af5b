"""Discovery of services eligible for composer commands.

A declared service is eligible when its image is built on the configured PHP
base image (``prooph/php:<version>`` by default) and its service directory
contains a composer manifest. The captured version selects the matching
composer image later on.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from micro_cli.utils.logger import get_logger

logger = get_logger("discovery")

DEFAULT_BASE_IMAGE = "prooph/php"
DEFAULT_MANIFEST = "composer.json"


@dataclass(frozen=True)
class ServiceEntry:
    """A service declared in the deployment descriptor."""

    name: str
    image_reference: str
    directory: Path


@dataclass(frozen=True)
class EligibleService:
    """A declared service that composer can run against."""

    entry: ServiceEntry
    tool_version_tag: str

    def __post_init__(self):
        if not self.tool_version_tag:
            raise ValueError(f"Eligible service '{self.entry.name}' needs a version tag")

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def directory(self) -> Path:
        return self.entry.directory


def base_image_pattern(base_image: str = DEFAULT_BASE_IMAGE) -> re.Pattern:
    """Compile the ``^<vendor>/<tool>:<version>`` pattern; group 1 is the version."""
    return re.compile(rf"^{re.escape(base_image)}:([0-9.]+)")


def discover_services(
    declared: dict[str, dict[str, Any]],
    service_root: str | Path,
    base_image: str = DEFAULT_BASE_IMAGE,
    manifest: str = DEFAULT_MANIFEST,
) -> dict[str, EligibleService]:
    """Filter declared services down to those composer can operate on.

    Args:
        declared: Service name to raw descriptor entry, in declaration order
        service_root: Directory holding one sub-directory per service
        base_image: Image prefix (``vendor/tool``) an eligible image must start with
        manifest: File that must exist in the service directory

    Returns:
        Eligible services keyed by name, in declaration order. Empty when
        nothing qualifies.
    """
    pattern = base_image_pattern(base_image)
    service_root = Path(service_root)
    eligible = {}

    for name, config in declared.items():
        image = config.get("image")
        if not isinstance(image, str) or not image:
            logger.debug(f"Skipping '{name}': no image declared")
            continue

        match = pattern.match(image)
        if not match:
            logger.debug(f"Skipping '{name}': image '{image}' is not based on {base_image}")
            continue

        directory = service_root / name
        if not (directory / manifest).is_file():
            logger.debug(f"Skipping '{name}': no {manifest} in {directory}")
            continue

        entry = ServiceEntry(name=name, image_reference=image, directory=directory)
        eligible[name] = EligibleService(entry=entry, tool_version_tag=match.group(1))

    logger.debug(f"Eligible services: {', '.join(eligible) or 'none'}")
    return eligible
