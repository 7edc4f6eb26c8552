"""Connector producing external clients for Cluster managed resources."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from kubernetes import client

from .. import metrics
from ..builders.backend import BackendClient, BackendOptions, create_backend_from_credentials
from ..constants import (
    API_GROUP,
    API_GROUP_VERSION,
    API_VERSION,
    FIELD_MANAGER,
    KIND_PROVIDER_CONFIG_USAGE,
    LABEL_PROVIDER_CONFIG,
    PLURAL_PROVIDER_CONFIG_USAGES,
    PLURAL_PROVIDER_CONFIGS,
)
from ..exceptions import (
    ClientConstructionError,
    CredentialsError,
    ProviderConfigError,
    UsageTrackingError,
)
from ..resources.cluster import ClusterResource
from ..utils.cache import cache_provider_config, get_cached_provider_config
from .credentials import extract_credentials
from .external import ExternalClient, as_cluster

logger = logging.getLogger(__name__)

BackendFactory = Callable[[bytes, Optional[BackendOptions]], BackendClient]


def get_provider_config_with_cache(api: client.CustomObjectsApi, name: str) -> dict[str, Any]:
    """Get a cluster-scoped ProviderConfig, with caching.

    Raises:
        client.exceptions.ApiException: If the provider config cannot be read
    """
    cached = get_cached_provider_config(name)
    if cached is not None:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="cache_hit").inc()
        return cached

    start_time = time.time()
    try:
        provider_config = api.get_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_PROVIDER_CONFIGS,
            name=name,
        )
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="success").inc()
        cache_provider_config(name, provider_config)
        return provider_config
    except Exception:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="error").inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation="get_provider_config").observe(duration)


def track_provider_config_usage(api: client.CustomObjectsApi, resource: ClusterResource) -> None:
    """Record that a managed resource uses its provider config.

    The usage object is named after the resource UID and owned by it, so it
    goes away with the resource.
    """
    if not resource.uid:
        raise ValueError("managed resource has no uid")

    pc_name = resource.provider_config_name
    body = {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_PROVIDER_CONFIG_USAGE,
        "metadata": {
            "name": resource.uid,
            "labels": {LABEL_PROVIDER_CONFIG: pc_name},
            "ownerReferences": [resource.owner_reference()],
        },
        "providerConfigRef": {"name": pc_name},
        "resourceRef": {
            "apiVersion": resource.api_version,
            "kind": resource.kind,
            "name": resource.name,
        },
    }

    try:
        api.create_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_PROVIDER_CONFIG_USAGES,
            body=body,
            field_manager=FIELD_MANAGER,
        )
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
        api.patch_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_PROVIDER_CONFIG_USAGES,
            name=resource.uid,
            body=body,
            field_manager=FIELD_MANAGER,
        )


class Connector:
    """Produces an ExternalClient bound to one Cluster resource."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        custom_api: client.CustomObjectsApi,
        new_backend: BackendFactory = create_backend_from_credentials,
        backend_options: BackendOptions | None = None,
    ) -> None:
        self.core_api = core_api
        self.custom_api = custom_api
        self.new_backend = new_backend
        self.backend_options = backend_options

    def connect(self, mg: Any) -> ExternalClient:
        """Track usage, resolve credentials and build an external client.

        Raises:
            NotAClusterError: If mg is not a Cluster
            UsageTrackingError: If usage cannot be recorded
            ProviderConfigError: If the provider config cannot be fetched
            CredentialsError: If credentials cannot be extracted
            ClientConstructionError: If the backend client cannot be built
        """
        resource = as_cluster(mg)

        try:
            track_provider_config_usage(self.custom_api, resource)
        except Exception as e:
            raise UsageTrackingError(str(e)) from e

        try:
            provider_config = get_provider_config_with_cache(self.custom_api, resource.provider_config_name)
        except Exception as e:
            raise ProviderConfigError(str(e)) from e

        try:
            credentials = (provider_config.get("spec") or {}).get("credentials") or {}
            creds = extract_credentials(self.core_api, credentials)
        except Exception as e:
            raise CredentialsError(str(e)) from e

        try:
            backend = self.new_backend(creds, self.backend_options)
        except Exception as e:
            raise ClientConstructionError(str(e)) from e

        logger.debug(f"Connected {resource.name} using provider config {resource.provider_config_name}")
        return ExternalClient(backend=backend, kube=self.core_api, custom_api=self.custom_api)
