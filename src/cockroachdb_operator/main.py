"""Main entry point for the CockroachDB Operator."""

from __future__ import annotations

import logging
import os
from typing import Any

import kopf

from . import config
from . import handlers  # noqa: F401
from . import logging as structured_logging
from .health import start_health_server
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    structured_logging.setup_structured_logging(level)
    initialize_tracing()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    # Exponential backoff: 1s, 2s, 4s, 8s, 16s, 32s, 60s (max)
    settings.execution.min_retry_delay = 1.0
    settings.execution.max_retry_delay = 60.0
    settings.execution.retry_backoff = 2.0
    settings.execution.max_retries = 5
    settings.execution.backoff_jitter = 0.1

    start_health_server(config.METRICS_PORT)
    logger.info(f"Operator configured, serving metrics and health checks on port {config.METRICS_PORT}")
