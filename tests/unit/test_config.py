"""Unit tests for config.py"""

import pytest

from mdcat.config import load_config


def test_load_config_defaults():
    """Settings defaults apply when no config.yaml, env var, or override exists."""
    settings = load_config()
    assert settings.parser_config == "gfm-like"
    assert settings.asset_scheme == "asset"
    assert settings.case_sensitive is False


def test_load_config_reads_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("code_class: hljs\nregex: true\n")
    settings = load_config()
    assert settings.code_class == "hljs"
    assert settings.regex is True


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDCAT_CODE_CLASS takes precedence over config.yaml."""
    (tmp_path / "config.yaml").write_text("code_class: hljs\n")
    monkeypatch.setenv("MDCAT_CODE_CLASS", "codehilite")
    assert load_config().code_class == "codehilite"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDCAT_PARSER_CONFIG", "commonmark")
    assert load_config(overrides={"parser_config": "zero"}).parser_config == "zero"
    assert load_config(overrides={"parser_config": None}).parser_config == "commonmark"


def test_load_config_env_bool_coerced(monkeypatch):
    monkeypatch.setenv("MDCAT_CASE_SENSITIVE", "true")
    assert load_config().case_sensitive is True


def test_load_config_invalid_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_invalid_value(monkeypatch):
    """Validation errors surface as ValueError for the CLI to report."""
    monkeypatch.setenv("MDCAT_LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError):
        load_config()
