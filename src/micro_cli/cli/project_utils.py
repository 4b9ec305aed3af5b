"""Utilities for project path resolution.

Helpers shared by CLI commands for the --project and --descriptor options
and the MICRO_PROJECT environment variable.
"""

import os
from pathlib import Path


def resolve_project_path(project_arg: str | None = None) -> Path:
    """Resolve project directory from multiple sources.

    Resolution priority:
    1. --project CLI argument (if provided)
    2. MICRO_PROJECT environment variable (if set)
    3. Current working directory (default)

    Examples:
        >>> os.environ['MICRO_PROJECT'] = '/tmp/shop'
        >>> resolve_project_path()
        Path('/tmp/shop')
    """
    if project_arg:
        return Path(project_arg).expanduser().resolve()

    env_project = os.environ.get("MICRO_PROJECT")
    if env_project:
        return Path(env_project).expanduser().resolve()

    return Path.cwd()


def resolve_descriptor_path(project_path: Path, descriptor_arg: str | None = None) -> Path | None:
    """Resolve an explicit --descriptor against the project directory.

    Returns None when no descriptor was given, so the configured default applies.
    """
    if not descriptor_arg:
        return None

    descriptor = Path(descriptor_arg).expanduser()
    if not descriptor.is_absolute():
        descriptor = project_path / descriptor
    return descriptor
