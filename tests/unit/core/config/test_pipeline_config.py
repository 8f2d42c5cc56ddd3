import logging
from pathlib import Path

import pydantic
import pytest
from http_pipeline.core.common.exceptions import ValidationError
from http_pipeline.core.config.app_config import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_SAFE_INTEGER,
    LogLevel,
    PipelineConfig,
    load_config,
)
from http_pipeline.core.domain.request_options import HttpMethod


def test_defaults() -> None:
    config = PipelineConfig()

    assert config.default_timeout_seconds == DEFAULT_TIMEOUT_SECONDS == 30
    assert config.max_safe_integer == MAX_SAFE_INTEGER == 9007199254740991
    assert config.json_methods == frozenset({HttpMethod.GET, HttpMethod.POST})
    assert config.follow_redirects is True
    assert config.log_level is LogLevel.INFO


def test_from_env() -> None:
    config = PipelineConfig.from_env(
        environ={
            "HTTP_PIPELINE_DEFAULT_TIMEOUT": "12",
            "HTTP_PIPELINE_MAX_SAFE_INTEGER": "1000",
            "HTTP_PIPELINE_FOLLOW_REDIRECTS": "false",
            "HTTP_PIPELINE_JSON_METHODS": "get, put",
            "HTTP_PIPELINE_LOG_LEVEL": "debug",
        }
    )

    assert config.default_timeout_seconds == 12
    assert config.max_safe_integer == 1000
    assert config.follow_redirects is False
    assert config.json_methods == frozenset({HttpMethod.GET, HttpMethod.PUT})
    assert config.log_level is LogLevel.DEBUG


def test_from_env_ignores_bad_values() -> None:
    config = PipelineConfig.from_env(
        environ={
            "HTTP_PIPELINE_DEFAULT_TIMEOUT": "-3",
            "HTTP_PIPELINE_MAX_SAFE_INTEGER": "lots",
            "HTTP_PIPELINE_LOG_LEVEL": "chatty",
        }
    )

    assert config.default_timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert config.max_safe_integer == MAX_SAFE_INTEGER
    assert config.log_level is LogLevel.INFO


@pytest.mark.parametrize(
    "environ",
    [
        {"HTTP_PIPELINE_MAX_SAFE_INTEGER": "0"},
        {"HTTP_PIPELINE_MAX_SAFE_INTEGER": "-10"},
        {"HTTP_PIPELINE_JSON_METHODS": "GET,FETCH"},
        {"HTTP_PIPELINE_JSON_METHODS": " , "},
    ],
)
def test_from_env_falls_back_on_out_of_range_values(
    environ: dict[str, str], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        config = PipelineConfig.from_env(environ=environ)

    assert config == PipelineConfig()
    assert "Ignoring" in caplog.text


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(pydantic.ValidationError):
        PipelineConfig(default_timeout_seconds=0)
    with pytest.raises(pydantic.ValidationError):
        PipelineConfig(json_methods=["FETCH"])


def test_load_config_from_yaml_with_env_override(tmp_path: Path) -> None:
    config_file = tmp_path / "pipeline.yaml"
    config_file.write_text(
        "default_timeout_seconds: 45\n"
        "json_methods: [GET, POST, DELETE]\n"
        "follow_redirects: false\n",
        encoding="utf-8",
    )

    config = load_config(
        config_file, environ={"HTTP_PIPELINE_DEFAULT_TIMEOUT": "5"}
    )

    assert config.default_timeout_seconds == 5
    assert config.json_methods == frozenset(
        {HttpMethod.GET, HttpMethod.POST, HttpMethod.DELETE}
    )
    assert config.follow_redirects is False


def test_load_config_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml", environ={})

    assert config == PipelineConfig()


def test_load_config_rejects_other_formats(tmp_path: Path) -> None:
    config_file = tmp_path / "pipeline.json"
    config_file.write_text("{}", encoding="utf-8")

    with pytest.raises(ValidationError, match="Unsupported configuration file format"):
        load_config(config_file, environ={})


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    config_file = tmp_path / "pipeline.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValidationError, match="must contain a mapping"):
        load_config(config_file, environ={})
