"""Application configuration: settings schema and config.yaml / .env loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDIMPORT_"


class Settings(BaseModel):
    app_name:           str = "mdimport"
    posts_dir:          str = Field(default="./content/posts", description="Directory scanned for .md posts")
    sanity_project_id:  Optional[str] = None
    sanity_dataset:     Optional[str] = None
    sanity_token:       Optional[str] = None
    sanity_api_version: str = Field(default="2025-12-14", description="Sanity HTTP API version date")
    db_url:             Optional[str] = Field(default=None, description="Write to a SQL dataset instead of Sanity")
    parser_config:      str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    max_retries:        int = Field(default=3, ge=1, description="Attempts per network operation")
    retry_base_delay:   float = Field(default=1.0, ge=0, description="Seconds before the first retry; doubles each attempt")
    request_timeout:    float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @property
    def dataset_label(self) -> str:
        if self.db_url:
            return self.db_url
        return self.sanity_dataset or "(unset)"

    def missing_sanity_settings(self) -> list[str]:
        """Names of MDIMPORT_* variables required for Sanity writes that are unset."""
        required = ("sanity_project_id", "sanity_dataset", "sanity_token")
        return [f"{ENV_PREFIX}{name.upper()}" for name in required if not getattr(self, name)]


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then .env and MDIMPORT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    load_dotenv(Path.cwd() / ".env", override=False)
    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
