"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:       str  = "mdcat"
    parser_config:  str  = Field(default="gfm-like",  description="MarkdownIt parser preset name")
    code_class:     str  = Field(default="highlight", description="Class attribute prefix for rendered code blocks")
    pygments_style: str  = Field(default="default",   description="Pygments style for the standalone page stylesheet")
    asset_scheme:   str  = Field(default="asset",     pattern=r"^[a-z][a-z0-9+.-]*$", description="URI scheme for resolved local assets")
    asset_host:     str  = Field(default="localhost", description="URI host for resolved local assets")
    case_sensitive: bool = Field(default=False,       description="Search is case-sensitive by default")
    regex:          bool = Field(default=False,       description="Search queries are patterns by default")
    log_level:      str  = Field(default="WARNING",   pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDCAT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDCAT_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
