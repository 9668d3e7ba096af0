"""Tests for application settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pypisift.config.settings import IndexSettings, RepositoryConfig, Settings


class TestRepositoryConfig:
    def test_hosted_is_default(self) -> None:
        assert RepositoryConfig().type == "hosted"

    def test_proxy_requires_remote_url(self) -> None:
        with pytest.raises(ValidationError, match="remote_url"):
            RepositoryConfig(type="proxy")

    def test_group_requires_members(self) -> None:
        with pytest.raises(ValidationError, match="at least one member"):
            RepositoryConfig(type="group")

    def test_unknown_type(self) -> None:
        with pytest.raises(ValidationError):
            RepositoryConfig(type="virtual")


class TestIndexSettings:
    def test_hosts_from_json_string(self) -> None:
        settings = IndexSettings(hosts='["https://a:9200", "https://b:9200"]')
        assert settings.hosts == ["https://a:9200", "https://b:9200"]

    def test_hosts_from_plain_string(self) -> None:
        assert IndexSettings(hosts="https://search:9200").hosts == ["https://search:9200"]

    def test_page_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            IndexSettings(page_size=0)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.repositories == {}
        assert settings.upstream.max_concurrent == 8
        assert settings.index.index_pattern == "*"

    def test_group_with_unknown_member(self) -> None:
        with pytest.raises(ValidationError, match="unknown repositories"):
            Settings(
                _env_file=None,  # type: ignore[call-arg]
                repositories={"pypi-all": {"type": "group", "members": ["missing"]}},
            )

    def test_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PYPISIFT_SERVER__PORT", "9090")
        monkeypatch.setenv("PYPISIFT_INDEX__HOSTS", '["https://search:9200"]')
        monkeypatch.setenv("PYPISIFT_UPSTREAM__TIMEOUT", "5")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.server.port == 9090
        assert settings.index.hosts == ["https://search:9200"]
        assert settings.upstream.timeout == 5.0


class TestFromYaml:
    def test_loads_repositories(self, tmp_path: Path) -> None:
        config = tmp_path / "pypisift-config.yaml"
        config.write_text(
            "index:\n"
            "  hosts: [\"https://search:9200\"]\n"
            "  index_pattern: \"components-{repository}\"\n"
            "repositories:\n"
            "  pypi-hosted:\n"
            "    type: hosted\n"
            "  pypi-proxy:\n"
            "    type: proxy\n"
            "    remote_url: https://pypi.org/pypi\n"
            "  pypi-all:\n"
            "    type: group\n"
            "    members: [pypi-hosted, pypi-proxy]\n"
        )

        settings = Settings.from_yaml(config)

        assert settings.index.index_pattern == "components-{repository}"
        assert settings.repositories["pypi-proxy"].remote_url == "https://pypi.org/pypi"
        assert settings.repositories["pypi-all"].members == ["pypi-hosted", "pypi-proxy"]

    def test_empty_file(self, tmp_path: Path) -> None:
        config = tmp_path / "empty.yaml"
        config.write_text("")
        assert Settings.from_yaml(config).repositories == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "missing.yaml")
