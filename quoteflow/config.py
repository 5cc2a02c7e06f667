from __future__ import annotations

import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel


class APIConfig(BaseModel):
    """Settings for the HTTP API."""

    host: str = "127.0.0.1"
    port: int = 3000
    prefix: str = "/api"
    title: str = "Quoteflow API"


class QuoteflowConfig(BaseModel):
    """Top-level configuration model."""

    api: APIConfig = APIConfig()
    database_url: Optional[str] = None
    seed_demo_data: bool = True
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> QuoteflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to QUOTEFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("QUOTEFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = QuoteflowConfig(**data)
    else:
        config = QuoteflowConfig()

    env_db_url = os.getenv("QUOTEFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    env_log_level = os.getenv("QUOTEFLOW_LOG_LEVEL")
    if env_log_level:
        config.log_level = env_log_level
    return config


def configure_logging(level: str = "INFO") -> None:
    """Attach a basic stream handler to the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
