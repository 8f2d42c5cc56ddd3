from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ConfigDict, Field, field_validator

from http_pipeline.core.common.exceptions import ValidationError
from http_pipeline.core.domain.request_options import HttpMethod
from http_pipeline.core.interfaces.model_bases import DomainModel

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
# Largest integer a IEEE-754 double holds exactly (Number.MAX_SAFE_INTEGER)
MAX_SAFE_INTEGER = 2**53 - 1


def _to_int(value: str, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _str_to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    val = val.strip().lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off", "none"):
        return False
    return default


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PipelineConfig(DomainModel):
    """Per-pipeline settings; independent pipelines may use different values."""

    model_config = ConfigDict(frozen=True)

    default_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    max_safe_integer: int = MAX_SAFE_INTEGER
    # Methods whose textual responses are parsed as JSON
    json_methods: frozenset[HttpMethod] = Field(
        default_factory=lambda: frozenset({HttpMethod.GET, HttpMethod.POST})
    )
    follow_redirects: bool = True
    log_level: LogLevel = LogLevel.INFO

    @field_validator("default_timeout_seconds")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_timeout_seconds must be positive")
        return value

    @field_validator("max_safe_integer")
    @classmethod
    def _check_safe_integer(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_safe_integer must be positive")
        return value

    @field_validator("json_methods", mode="before")
    @classmethod
    def _resolve_methods(cls, value: Any) -> frozenset[HttpMethod]:
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        return frozenset(
            item if isinstance(item, HttpMethod) else HttpMethod(str(item).strip().upper())
            for item in value
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @classmethod
    def from_env(
        cls,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> PipelineConfig:
        """Create a PipelineConfig from environment variables.

        Unparsable or out-of-range values fall back to the defaults. When no
        explicit mapping is given, a ``.env`` file is loaded into ``os.environ``
        first.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        env: Mapping[str, str] = environ

        config: dict[str, Any] = {
            "default_timeout_seconds": _to_int(
                env.get("HTTP_PIPELINE_DEFAULT_TIMEOUT", ""), DEFAULT_TIMEOUT_SECONDS
            ),
            "max_safe_integer": _to_int(
                env.get("HTTP_PIPELINE_MAX_SAFE_INTEGER", ""), MAX_SAFE_INTEGER
            ),
            "follow_redirects": _str_to_bool(
                env.get("HTTP_PIPELINE_FOLLOW_REDIRECTS"), True
            ),
        }
        if config["default_timeout_seconds"] <= 0:
            logger.warning(
                "Ignoring non-positive HTTP_PIPELINE_DEFAULT_TIMEOUT=%s",
                config["default_timeout_seconds"],
            )
            config["default_timeout_seconds"] = DEFAULT_TIMEOUT_SECONDS
        if config["max_safe_integer"] <= 0:
            logger.warning(
                "Ignoring non-positive HTTP_PIPELINE_MAX_SAFE_INTEGER=%s",
                config["max_safe_integer"],
            )
            config["max_safe_integer"] = MAX_SAFE_INTEGER

        json_methods = env.get("HTTP_PIPELINE_JSON_METHODS")
        if json_methods:
            names = [
                name.strip().upper() for name in json_methods.split(",") if name.strip()
            ]
            if names and all(name in HttpMethod.__members__ for name in names):
                config["json_methods"] = names
            else:
                logger.warning(
                    "Ignoring unsupported HTTP_PIPELINE_JSON_METHODS=%s", json_methods
                )

        log_level = env.get("HTTP_PIPELINE_LOG_LEVEL")
        if log_level and log_level.strip().upper() in LogLevel.__members__:
            config["log_level"] = log_level

        return cls.model_validate(config)


_ENV_KEYS = {
    "HTTP_PIPELINE_DEFAULT_TIMEOUT": "default_timeout_seconds",
    "HTTP_PIPELINE_MAX_SAFE_INTEGER": "max_safe_integer",
    "HTTP_PIPELINE_FOLLOW_REDIRECTS": "follow_redirects",
    "HTTP_PIPELINE_JSON_METHODS": "json_methods",
    "HTTP_PIPELINE_LOG_LEVEL": "log_level",
}


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> PipelineConfig:
    """Load configuration from an optional YAML file, then environment overrides.

    Args:
        config_path: Optional path to a ``.yaml``/``.yml`` file

    Returns:
        PipelineConfig instance
    """
    config_data: dict[str, Any] = {}

    if config_path:
        import yaml

        path = Path(config_path)
        if not path.exists():
            logger.warning("Configuration file not found: %s", config_path)
        else:
            if path.suffix.lower() not in [".yaml", ".yml"]:
                raise ValidationError(
                    f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml)."
                )
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValidationError(
                    f"Configuration file {path} must contain a mapping"
                )
            config_data.update(file_config)

    env_config = PipelineConfig.from_env(environ=environ)
    env: Mapping[str, str] = environ if environ is not None else os.environ
    for env_key, field_name in _ENV_KEYS.items():
        if env_key in env:
            config_data[field_name] = getattr(env_config, field_name)

    return PipelineConfig.model_validate(config_data)
