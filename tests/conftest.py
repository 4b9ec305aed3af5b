"""
Pytest configuration and shared test utilities.

Provides project factories that lay out a docker-compose.yml plus service
directories the way a micro deployment does.
"""

from pathlib import Path

import pytest
import yaml

from micro_cli.utils import config as config_module


@pytest.fixture(autouse=True)
def reset_config_cache(monkeypatch):
    """Isolate tests from each other's micro.yml and from the host environment."""
    monkeypatch.delenv("CONTAINER_RUNTIME", raising=False)
    monkeypatch.delenv("MICRO_PROJECT", raising=False)
    monkeypatch.delenv("MICRO_CONFIG", raising=False)
    config_module.reset_config_cache()
    yield
    config_module.reset_config_cache()


def write_project(
    root: Path,
    services: dict,
    manifests: tuple[str, ...] = (),
    descriptor: str = "docker-compose.yml",
) -> Path:
    """Create a project with the given services and composer.json files.

    Args:
        root: Project directory
        services: Descriptor ``services`` section
        manifests: Service names that get a service/<name>/composer.json
        descriptor: Descriptor file name
    """
    root.mkdir(parents=True, exist_ok=True)
    (root / descriptor).write_text(yaml.safe_dump({"version": "2", "services": services}, sort_keys=False))
    for name in manifests:
        service_dir = root / "service" / name
        service_dir.mkdir(parents=True, exist_ok=True)
        (service_dir / "composer.json").write_text("{}")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory fixture returning write_project bound to a fresh directory."""

    def _make(services: dict, manifests: tuple[str, ...] = (), **kwargs) -> Path:
        return write_project(tmp_path / "project", services, manifests, **kwargs)

    return _make


@pytest.fixture
def mixed_project(make_project):
    """Services a (eligible), b (no manifest), c (other image), d (eligible)."""
    return make_project(
        {
            "a": {"image": "prooph/php:7.2-fpm"},
            "b": {"image": "prooph/php:7.4"},
            "c": {"image": "other/thing:1.0"},
            "d": {"image": "prooph/php:7.3"},
        },
        manifests=("a", "d", "c"),
    )
