"""Tests for descriptor loading."""

import pytest

from micro_cli.deployment.descriptor import load_descriptor, read_services
from micro_cli.deployment.errors import DescriptorError


class TestReadServices:
    def test_returns_services_in_declaration_order(self):
        document = {"services": {"z": {"image": "a"}, "a": {"image": "b"}, "m": {}}}

        assert list(read_services(document)) == ["z", "a", "m"]

    def test_null_entry_becomes_empty_mapping(self):
        assert read_services({"services": {"web": None}}) == {"web": {}}

    @pytest.mark.parametrize(
        "document",
        [
            None,
            ["services"],
            {"version": "2"},
            {"services": ["a", "b"]},
            {"services": {"web": "nginx"}},
        ],
    )
    def test_malformed_documents_raise(self, document):
        with pytest.raises(DescriptorError):
            read_services(document)


class TestLoadDescriptor:
    def test_loads_file(self, make_project):
        project = make_project({"user": {"image": "prooph/php:7.2"}})

        services = load_descriptor(project / "docker-compose.yml")

        assert services == {"user": {"image": "prooph/php:7.2"}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DescriptorError) as exc_info:
            load_descriptor(tmp_path / "docker-compose.yml")

        assert "not found" in str(exc_info.value)
        assert exc_info.value.path.endswith("docker-compose.yml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("services: [unclosed\n")

        with pytest.raises(DescriptorError, match="Error parsing"):
            load_descriptor(path)

    def test_missing_services_section(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("version: '2'\nnetworks: {}\n")

        with pytest.raises(DescriptorError, match="no 'services' section"):
            load_descriptor(path)
