"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "NOTEBLOCKS_"


class Settings(BaseModel):
    app_name:      str = "noteblocks"
    db_url:        str = "sqlite:///noteblocks.db"
    vault_dir:     str = Field(default=".",    description="Vault directory scanned for notes")
    extensions:    str = Field(default=".md",  description="Comma-separated note file extensions")
    output_dir:    str = Field(default="dist", description="Directory for exported blocks")
    output_format: str = Field(default="json", pattern="^(json|md)$", description="json or md")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @property
    def extension_list(self) -> tuple[str, ...]:
        """Normalized extensions, e.g. 'md, .MDX' -> ('.md', '.mdx')."""
        exts = (e.strip().lower() for e in self.extensions.split(','))
        return tuple(e if e.startswith('.') else f".{e}" for e in exts if e)


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then NOTEBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
