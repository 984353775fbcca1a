"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    domain:           str = Field(default="localhost",    description="Site domain; links to other hosts are external")
    out_dir:          str = Field(default="out",          description="Directory for generated HTML and assets")
    authors_db:       str = Field(default="authors.yaml", description="Author registry: .yaml file or database URL")
    stylesheet:       str = Field(default="",             description="styles.css to copy next to the output")
    logo:             str = Field(default="",             description="logo.png to copy next to the output")
    force:            bool = Field(default=False,         description="Overwrite existing styles/logo in out_dir")
    verbose:          bool = False
    output_ast:       bool = Field(default=False,         description="Also write <stem>.ast.json")
    parser_config:    str = Field(default="gfm-like",     description="MarkdownIt parser preset name")
    words_per_minute: int = Field(default=120, ge=1,      description="Reading speed used for read time")
    highlight_style:  str = Field(default="monokai",      description="Pygments style for code blocks")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDFORGE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDFORGE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
