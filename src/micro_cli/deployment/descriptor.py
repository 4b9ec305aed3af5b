"""Deployment descriptor loading.

Reads docker-compose.yml (or any compose-shaped YAML document) and returns
the declared services. No validation beyond the document shape happens here;
eligibility is decided by :mod:`micro_cli.deployment.discovery`.
"""

from pathlib import Path
from typing import Any

import yaml

from micro_cli.deployment.errors import DescriptorError
from micro_cli.utils.logger import get_logger

logger = get_logger("descriptor")


def read_services(document: Any, source: str = "descriptor") -> dict[str, dict[str, Any]]:
    """Extract the services section from an already-parsed descriptor document.

    Args:
        document: Parsed descriptor (mapping expected)
        source: Label used in error messages (usually the file path)

    Returns:
        Mapping of service name to raw entry, in declaration order. ``null``
        entries become empty dicts.

    Raises:
        DescriptorError: If the document is not a mapping or has no usable services section
    """
    if not isinstance(document, dict):
        raise DescriptorError(f"{source} must contain a mapping at the top level", path=source)

    services = document.get("services")
    if services is None:
        raise DescriptorError(f"{source} has no 'services' section", path=source)
    if not isinstance(services, dict):
        raise DescriptorError(f"'services' in {source} must be a mapping", path=source)

    declared = {}
    for name, entry in services.items():
        if entry is None:
            entry = {}
        elif not isinstance(entry, dict):
            raise DescriptorError(f"Service '{name}' in {source} must be a mapping", path=source)
        declared[str(name)] = entry

    logger.debug(f"{len(declared)} service(s) declared in {source}")
    return declared


def load_descriptor(path: str | Path) -> dict[str, dict[str, Any]]:
    """Load a descriptor file and return its declared services.

    Raises:
        DescriptorError: If the file is missing, is not valid YAML, or is malformed
    """
    path = Path(path)
    if not path.is_file():
        raise DescriptorError(f"Deployment descriptor not found: {path}", path=str(path))

    try:
        with open(path) as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DescriptorError(f"Error parsing {path}: {e}", path=str(path)) from e
    except OSError as e:
        raise DescriptorError(f"Cannot read {path}: {e}", path=str(path)) from e

    return read_services(document, source=str(path))
