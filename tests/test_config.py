"""Tests for configuration management."""

import pytest

from valibook.utils.config import CONFIG_ENV_VAR, Config, get_config, set_config


def test_defaults():
    """Defaults cover every section."""
    config = Config()
    assert config.get("discovery.min_score") == 0.5
    assert config.get("validation.display_limit") == 10
    assert "kod" in config.get("discovery.key_vocabulary")
    assert config.get("missing.key", "fallback") == "fallback"


def test_from_yaml_merges_defaults(tmp_path):
    """YAML values override defaults without dropping other keys."""
    path = tmp_path / "config.yml"
    path.write_text("validation:\n  max_workers: 1\n", encoding="utf-8")

    config = Config.from_yaml(path)

    assert config.get("validation.max_workers") == 1
    assert config.get("validation.display_limit") == 10
    assert config.section("discovery")["sample_limit"] == 200


def test_set_and_section_copy():
    """set writes nested keys; section returns a copy."""
    config = Config()
    config.set("api.port", 9000)
    config.set("new.nested.key", True)
    section = config.section("api")
    section["port"] = 1

    assert config.get("api.port") == 9000
    assert config.get("new.nested.key") is True


def test_env_var(tmp_path, monkeypatch):
    """get_config reads the file named by the environment variable."""
    path = tmp_path / "custom.yml"
    path.write_text("discovery:\n  min_score: 0.7\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    set_config(None)

    assert get_config().get("discovery.min_score") == 0.7


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
