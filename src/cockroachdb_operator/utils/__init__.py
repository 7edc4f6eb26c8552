"""Utility functions for the CockroachDB Operator."""

from .cache import cache_provider_config, get_cached_provider_config, invalidate_provider_configs
from .conditions import available, creating, reconcile_error, reconcile_success, unavailable, update_condition
from .errors import sanitize_error_message, sanitize_exception
from .events import emit_event
from .secrets import get_secret_bytes, upsert_secret

__all__ = [
    "available",
    "creating",
    "unavailable",
    "reconcile_success",
    "reconcile_error",
    "update_condition",
    "sanitize_error_message",
    "sanitize_exception",
    "emit_event",
    "get_secret_bytes",
    "upsert_secret",
    "get_cached_provider_config",
    "cache_provider_config",
    "invalidate_provider_configs",
]
