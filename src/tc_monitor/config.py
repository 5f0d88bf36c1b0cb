"""Configuration models for the monitor datasource.

Settings come from environment variables (``TCM_`` prefix, ``__`` for nested
fields) and optionally a YAML file whose values are overridden by explicit
keyword arguments.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import InstanceSettings


class ClientConfig(BaseModel):
    """Settings shared by every per-service HTTP client."""
    timeout_ms: int = 10000
    default_region: str = "ap-guangzhou"
    api_version: str = "2018-07-24"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(env_prefix="TCM_", env_nested_delimiter="__")

    environment: str = "dev"
    log_level: str = "INFO"
    datasource: InstanceSettings = InstanceSettings()
    client: ClientConfig = ClientConfig()

    def __init__(self, _env_file: Optional[str] = None, **values: Any) -> None:
        file_values: Dict[str, Any] = {}
        if _env_file:
            cfg_path = Path(_env_file)
            if cfg_path.exists():
                loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
                if isinstance(loaded, dict):
                    file_values = loaded
        merged = {**file_values, **values}
        super().__init__(**merged)
