"""
Configuration loader for form sessions (drafts, submission backend, logging).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class DraftConfig(BaseModel):
    """Draft persistence configuration"""

    debounce_seconds: float = Field(default=0.3, ge=0.0, le=10.0)
    ttl_seconds: int = Field(default=1800, ge=60)
    redis_url_env: str = "REDIS_URL"


class SubmissionConfig(BaseModel):
    """Submission gateway configuration"""

    backend: Literal["mock", "http"] = "mock"
    base_url: str = ""
    base_url_env: str = "SUBMISSION_API_URL"
    api_key_env: str = "SUBMISSION_API_KEY"
    timeout_seconds: float = Field(default=15.0, gt=0.0, le=120.0)
    mock_delay_seconds: float = Field(default=2.0, ge=0.0)
    mock_failure_rate: float = Field(default=0.0, ge=0.0, le=1.0)


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class FormFlowConfig(BaseModel):
    drafts: DraftConfig = Field(default_factory=DraftConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def redis_url(self) -> Optional[str]:
        return os.getenv(self.drafts.redis_url_env) or None

    def submission_base_url(self) -> str:
        return os.getenv(self.submission.base_url_env) or self.submission.base_url

    def submission_api_key(self) -> str:
        return os.getenv(self.submission.api_key_env, "")


def default_config_path() -> Path:
    override = os.getenv("FORMFLOW_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent / "config" / "formflow.yml"


def load_formflow_config(config_path: Optional[Path] = None) -> FormFlowConfig:
    """
    Load and validate formflow configuration from a YAML file

    Args:
        config_path: Path to config file. Defaults to $FORMFLOW_CONFIG or config/formflow.yml

    Returns:
        Validated FormFlowConfig object; defaults when the file does not exist

    Raises:
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        logger.info("Config file %s not found, using defaults", config_path)
        return FormFlowConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = FormFlowConfig(**data)
        logger.info("Successfully loaded formflow config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("formflow config validation failed: %s", e)
        raise
