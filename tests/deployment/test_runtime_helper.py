"""Unit tests for runtime_helper module."""

from unittest.mock import patch

import pytest

from micro_cli.deployment.errors import RuntimeNotFoundError
from micro_cli.deployment.runtime_helper import RuntimeResolver, get_runtime_name


class TestRuntimeResolver:
    @patch("shutil.which")
    def test_explicit_path_skips_search(self, mock_which):
        """An explicit executable is returned as-is, even if another runtime is on PATH."""
        mock_which.return_value = "/usr/bin/docker"

        resolver = RuntimeResolver("/usr/local/bin/podman")

        assert resolver.resolve() == "/usr/local/bin/podman"
        mock_which.assert_not_called()

    @patch("shutil.which")
    def test_explicit_path_is_not_validated(self, mock_which):
        assert RuntimeResolver("/does/not/exist").resolve() == "/does/not/exist"

    @patch("shutil.which")
    def test_searches_path_for_docker(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"

        assert RuntimeResolver().resolve() == "/usr/bin/docker"
        mock_which.assert_called_once_with("docker")

    @patch("shutil.which")
    def test_search_is_memoized_per_resolver(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"
        resolver = RuntimeResolver()

        resolver.resolve()
        resolver.resolve()

        assert mock_which.call_count == 1

    @patch("shutil.which")
    def test_separate_resolvers_do_not_share_state(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"

        RuntimeResolver().resolve()
        RuntimeResolver().resolve()

        assert mock_which.call_count == 2

    @patch("shutil.which")
    def test_raise_error_when_not_found(self, mock_which):
        mock_which.return_value = None

        with pytest.raises(RuntimeNotFoundError) as exc_info:
            RuntimeResolver().resolve()

        assert "--docker-executable" in str(exc_info.value)

    @patch("shutil.which")
    def test_configured_runtime_name(self, mock_which):
        mock_which.return_value = "/usr/bin/podman"

        assert RuntimeResolver(runtime_name="podman").resolve() == "/usr/bin/podman"
        mock_which.assert_called_once_with("podman")


class TestGetRuntimeName:
    @pytest.mark.parametrize("configured", [None, "auto", "containerd", ""])
    def test_defaults_to_docker(self, configured):
        assert get_runtime_name(configured) == "docker"

    @pytest.mark.parametrize("configured", ["PODMAN", "Podman", "podman"])
    def test_config_is_case_insensitive(self, configured):
        assert get_runtime_name(configured) == "podman"

    def test_env_var_overrides_config(self, monkeypatch):
        monkeypatch.setenv("CONTAINER_RUNTIME", "podman")

        assert get_runtime_name("docker") == "podman"
