from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from http_pipeline.connectors.base import Transport
from http_pipeline.core.common.logging_utils import configure_logging
from http_pipeline.core.config.app_config import PipelineConfig, load_config
from http_pipeline.core.domain.responses import ResponseEnvelope
from http_pipeline.core.services.pipeline import HttpPipeline


async def send(
    opts: Any,
    profile: Any = None,
    *,
    config: PipelineConfig | None = None,
    transport: Transport | None = None,
) -> ResponseEnvelope:
    """Run one call through a short-lived pipeline.

    ``opts`` may be a RequestOptions or a loosely-typed mapping; ``profile``
    may be a TransportProfile, a mapping or None.
    """
    async with HttpPipeline(config=config, transport=transport) as pipeline:
        return await pipeline.send_mapping(opts, profile)


def send_sync(
    opts: Any,
    profile: Any = None,
    *,
    config: PipelineConfig | None = None,
    transport: Transport | None = None,
) -> ResponseEnvelope:
    """Blocking wrapper around :func:`send` for callers without an event loop."""
    return asyncio.run(send(opts, profile, config=config, transport=transport))


def configure(
    config_path: str | Path | None = None,
    *,
    log_file: str | None = None,
) -> PipelineConfig:
    """Load configuration and set up logging at the configured level.

    Returns the loaded config so it can be handed to :class:`HttpPipeline`.
    """
    config = load_config(config_path)
    configure_logging(config.log_level.value, log_file=log_file)
    return config
