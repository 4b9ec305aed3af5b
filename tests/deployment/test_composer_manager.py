"""Tests for the end-to-end composer pipeline with a fake process runner."""

from unittest.mock import MagicMock, patch

import pytest

from micro_cli.deployment.composer_manager import ComposerSettings, run_composer
from micro_cli.deployment.dispatcher import CommandVerb
from micro_cli.deployment.errors import (
    DescriptorError,
    DispatchFailure,
    ExitOutcome,
    InvalidSelectionError,
    RuntimeNotFoundError,
)
from micro_cli.deployment.selection import SelectionMode, SelectionRequest


class RecordingRunner:
    def __init__(self, statuses=None):
        self.statuses = list(statuses or [])
        self.commands = []

    def __call__(self, cmd, on_output, timeout=0, idle_timeout=0):
        self.commands.append(cmd)
        return self.statuses.pop(0) if self.statuses else 0


def _run(settings, request, runner, choose=None):
    return run_composer(
        CommandVerb.install(),
        request,
        settings,
        choose=choose or MagicMock(side_effect=AssertionError("unexpected prompt")),
        write=MagicMock(),
        announce=MagicMock(),
        runner=runner,
    )


ALL = SelectionRequest(SelectionMode.ALL)


class TestComposerSettings:
    def test_defaults_without_micro_yml(self, mixed_project):
        settings = ComposerSettings.from_config(mixed_project)

        assert settings.descriptor_path == mixed_project / "docker-compose.yml"
        assert settings.service_root == mixed_project / "service"
        assert settings.base_image == "prooph/php"
        assert settings.composer_image == "prooph/composer"
        assert settings.timeout == 0
        assert settings.idle_timeout == 30
        assert settings.runtime_name == "docker"

    def test_reads_micro_yml(self, mixed_project, monkeypatch):
        monkeypatch.setenv("IDLE", "45")
        (mixed_project / "micro.yml").write_text(
            "composer:\n"
            "  image: acme/composer\n"
            "  idle_timeout: ${IDLE}\n"
            "project:\n"
            "  service_dir: apps\n"
            "container_runtime: podman\n"
        )

        settings = ComposerSettings.from_config(mixed_project)

        assert settings.composer_image == "acme/composer"
        assert settings.idle_timeout == 45
        assert settings.service_root == mixed_project / "apps"
        assert settings.runtime_name == "podman"

    def test_none_overrides_keep_configured_values(self, mixed_project):
        settings = ComposerSettings.from_config(mixed_project, timeout=None, idle_timeout=0)

        assert settings.timeout == 0
        assert settings.idle_timeout == 0

    def test_explicit_descriptor(self, mixed_project):
        settings = ComposerSettings.from_config(mixed_project, descriptor="compose.prod.yml")

        assert settings.descriptor_path == mixed_project / "compose.prod.yml"


class TestRunComposer:
    def test_all_runs_eligible_services_in_discovery_order(self, mixed_project):
        runner = RecordingRunner()
        settings = ComposerSettings.from_config(mixed_project, docker_executable="/bin/docker")

        assert _run(settings, ALL, runner) is ExitOutcome.SUCCESS
        assert [cmd[7] for cmd in runner.commands] == ["prooph/composer:7.2", "prooph/composer:7.3"]
        assert runner.commands[0][6] == f"{mixed_project / 'service' / 'a'}:/app:rw"

    def test_first_failure_skips_remaining_services(self, mixed_project):
        runner = RecordingRunner([1, 0])
        settings = ComposerSettings.from_config(mixed_project, docker_executable="/bin/docker")

        with pytest.raises(DispatchFailure) as exc_info:
            _run(settings, ALL, runner)

        assert len(runner.commands) == 1
        assert exc_info.value.service == "a"

    @pytest.mark.parametrize(
        "request_",
        [
            SelectionRequest(SelectionMode.ALL),
            SelectionRequest(SelectionMode.SINGLE, "a"),
            SelectionRequest(SelectionMode.INTERACTIVE),
        ],
    )
    def test_no_eligible_services_returns_one(self, make_project, request_, caplog):
        project = make_project({"db": {"image": "postgres:15"}})
        runner = RecordingRunner()

        outcome = _run(ComposerSettings.from_config(project), request_, runner)

        assert outcome is ExitOutcome.NO_ELIGIBLE_SERVICES
        assert int(outcome) == 1
        assert runner.commands == []
        assert "No php services declared" in caplog.text

    @patch("shutil.which", return_value=None)
    def test_no_eligible_services_does_not_need_runtime(self, mock_which, make_project):
        project = make_project({})

        assert _run(ComposerSettings.from_config(project), ALL, RecordingRunner()) == 1

    def test_unknown_service_prompts_over_eligible_names(self, mixed_project):
        runner = RecordingRunner()
        choose = MagicMock(return_value="d")
        settings = ComposerSettings.from_config(mixed_project, docker_executable="/bin/docker")

        _run(settings, SelectionRequest(SelectionMode.SINGLE, "unknown-service"), runner, choose)

        choose.assert_called_once_with(["a", "d"])
        assert [cmd[7] for cmd in runner.commands] == ["prooph/composer:7.3"]

    def test_cancelled_prompt_runs_nothing(self, mixed_project):
        runner = RecordingRunner()
        settings = ComposerSettings.from_config(mixed_project, docker_executable="/bin/docker")

        with pytest.raises(InvalidSelectionError):
            _run(settings, SelectionRequest(SelectionMode.INTERACTIVE), runner, lambda names: None)

        assert runner.commands == []

    @patch("shutil.which", return_value=None)
    def test_missing_runtime_runs_nothing(self, mock_which, mixed_project):
        runner = RecordingRunner()

        with pytest.raises(RuntimeNotFoundError):
            _run(ComposerSettings.from_config(mixed_project), ALL, runner)

        assert runner.commands == []

    @patch("shutil.which", return_value="/usr/bin/docker")
    def test_runtime_found_on_path(self, mock_which, mixed_project):
        runner = RecordingRunner()

        _run(ComposerSettings.from_config(mixed_project), SelectionRequest(SelectionMode.SINGLE, "a"), runner)

        assert runner.commands[0][0] == "/usr/bin/docker"

    def test_missing_descriptor(self, tmp_path):
        with pytest.raises(DescriptorError):
            _run(ComposerSettings.from_config(tmp_path), ALL, RecordingRunner())
