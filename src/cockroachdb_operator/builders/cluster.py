"""Builder for cluster parameters and API requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..services.cockroach.models import (
    CloudProvider,
    CreateClusterRequest,
    CreateSQLUserRequest,
    UpdateClusterSpecification,
)


@dataclass(frozen=True)
class SecretKeySelector:
    """Reference to a key in a namespaced secret."""

    name: str
    namespace: str
    key: str


@dataclass(frozen=True)
class ClusterParameters:
    """Desired state of a serverless cluster, from spec.forProvider."""

    provider: CloudProvider
    username: str
    regions: list[str] = field(default_factory=list)
    spend_limit: int = 0
    password_secret_ref: SecretKeySelector | None = None


def _secret_key_selector(ref: dict[str, Any] | None, field_path: str) -> SecretKeySelector | None:
    if not ref:
        return None
    missing = [k for k in ("name", "namespace", "key") if not ref.get(k)]
    if missing:
        raise ValueError(f"{field_path} is missing {', '.join(missing)}")
    return SecretKeySelector(name=ref["name"], namespace=ref["namespace"], key=ref["key"])


def create_cluster_parameters_from_spec(spec: dict[str, Any]) -> ClusterParameters:
    """Create cluster parameters from a Cluster CRD spec.

    Args:
        spec: Cluster CRD spec

    Returns:
        Resolved cluster parameters; spendLimit defaults to 0

    Raises:
        ValueError: If the spec is invalid
    """
    for_provider = spec.get("forProvider") or {}

    provider = CloudProvider.parse(for_provider.get("provider") or CloudProvider.UNSPECIFIED.value)

    serverless = for_provider.get("serverless")
    if not serverless:
        raise ValueError("forProvider.serverless is required")
    regions = list(serverless.get("regions") or [])
    if not regions:
        raise ValueError("forProvider.serverless.regions must not be empty")

    spend_limit = serverless.get("spendLimit")
    spend_limit = 0 if spend_limit is None else int(spend_limit)
    if spend_limit < 0:
        raise ValueError("forProvider.serverless.spendLimit must be >= 0")

    credentials = for_provider.get("credentials")
    if not credentials or not credentials.get("username"):
        raise ValueError("forProvider.credentials.username is required")

    return ClusterParameters(
        provider=provider,
        username=credentials["username"],
        regions=regions,
        spend_limit=spend_limit,
        password_secret_ref=_secret_key_selector(
            credentials.get("passwordSecretRef"), "forProvider.credentials.passwordSecretRef"
        ),
    )


def create_cluster_request(name: str, params: ClusterParameters) -> CreateClusterRequest:
    """Build the create-cluster request for a managed resource."""
    return CreateClusterRequest(
        name=name,
        provider=params.provider,
        regions=params.regions,
        spend_limit=params.spend_limit,
    )


def update_cluster_spec(params: ClusterParameters) -> UpdateClusterSpecification:
    """Build the update request; spend limit is the only mutable field."""
    return UpdateClusterSpecification(spend_limit=params.spend_limit)


def create_sql_user_request(params: ClusterParameters, password: str) -> CreateSQLUserRequest:
    """Build the create-SQL-user request for the configured username."""
    return CreateSQLUserRequest(name=params.username, password=password)
