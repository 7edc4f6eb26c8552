"""TTL cache for cluster-scoped ProviderConfig reads."""

from __future__ import annotations

import time
from typing import Any, Optional

from .. import config

# ProviderConfig name -> (object, time stored)
_provider_configs: dict[str, tuple[dict[str, Any], float]] = {}


def get_cached_provider_config(name: str) -> Optional[dict[str, Any]]:
    """Return the cached ProviderConfig, or None if absent or older than K8S_CACHE_TTL_SECONDS."""
    entry = _provider_configs.get(name)
    if entry is None:
        return None

    provider_config, stored_at = entry
    if time.time() - stored_at > config.K8S_CACHE_TTL_SECONDS:
        del _provider_configs[name]
        return None
    return provider_config


def cache_provider_config(name: str, provider_config: dict[str, Any]) -> None:
    _provider_configs[name] = (provider_config, time.time())


def invalidate_provider_configs(name: Optional[str] = None) -> None:
    """Drop one cached ProviderConfig, or all of them when name is None."""
    if name is None:
        _provider_configs.clear()
    else:
        _provider_configs.pop(name, None)
