"""Unit tests for config.py"""

import pytest

from mdforge.config import Settings, load_config


def test_load_config_defaults(tmp_path, monkeypatch):
    """Settings defaults apply when no config.yaml, env var, or CLI override exists."""
    monkeypatch.chdir(tmp_path)
    settings = load_config()
    assert settings == Settings()
    assert settings.domain == "localhost"
    assert settings.words_per_minute == 120
    assert settings.parser_config == "gfm-like"


def test_load_config_reads_config_yaml(tmp_path, monkeypatch):
    """Values in config.yaml replace the defaults."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("domain: example.com\nout_dir: site\n")
    settings = load_config()
    assert settings.domain == "example.com"
    assert settings.out_dir == "site"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDFORGE_DOMAIN takes precedence over config.yaml domain."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("domain: example.com\n")
    monkeypatch.setenv("MDFORGE_DOMAIN", "env.example.com")
    settings = load_config()
    assert settings.domain == "env.example.com"


def test_load_config_cli_overrides_env(tmp_path, monkeypatch):
    """A non-None CLI override beats the env var."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDFORGE_DOMAIN", "env.example.com")
    settings = load_config(overrides={"domain": "cli.example.com"})
    assert settings.domain == "cli.example.com"


def test_load_config_none_overrides_ignored(tmp_path, monkeypatch):
    """None-valued overrides (unset CLI options) leave lower layers in place."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDFORGE_OUT_DIR", "env-out")
    settings = load_config(overrides={"out_dir": None})
    assert settings.out_dir == "env-out"


def test_load_config_env_coerces_types(tmp_path, monkeypatch):
    """Env vars are coerced to the field type."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDFORGE_WORDS_PER_MINUTE", "200")
    monkeypatch.setenv("MDFORGE_FORCE", "true")
    settings = load_config()
    assert settings.words_per_minute == 200
    assert settings.force is True


def test_load_config_invalid_yaml(tmp_path, monkeypatch):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_rejects_bad_words_per_minute(tmp_path, monkeypatch):
    """words_per_minute must be at least 1."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError):
        load_config(overrides={"words_per_minute": 0})
