"""External client for Cluster managed resources.

Observe, Create, Update and Delete converge a CockroachDB Cloud serverless
cluster towards the desired state of a Cluster resource. No state is kept
between calls: every call re-derives intent from the external-name annotation
and a fresh lookup.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from kubernetes import client

from .. import metrics
from ..builders.backend import BackendClient
from ..builders.cluster import create_cluster_request, create_sql_user_request, update_cluster_spec
from ..constants import (
    ANNOTATION_EXTERNAL_NAME,
    API_GROUP,
    API_VERSION,
    CONNECTION_KEY_CA_CERT,
    CONNECTION_KEY_DSN,
    FIELD_MANAGER,
    KIND_CLUSTER,
    PLURAL_CLUSTERS,
)
from ..exceptions import CloudAPIError, NotAClusterError, OperatorError
from ..resources.cluster import ClusterResource
from ..services.cockroach.models import Cluster, ClusterState
from ..utils.conditions import available, creating, unavailable
from .credentials import resolve_password

logger = logging.getLogger(__name__)

SQL_PORT = 26257
DEFAULT_DATABASE = "defaultdb"


@dataclass
class ExternalObservation:
    """Result of observing the external resource.

    connection_pending is set when the cluster exists but its SQL user and
    connection details were never confirmed as published.
    """

    resource_exists: bool
    resource_up_to_date: bool = False
    connection_pending: bool = False
    condition: dict[str, Any] | None = None
    connection_details: dict[str, bytes] = field(default_factory=dict)


@dataclass
class ExternalCreation:
    connection_details: dict[str, bytes] = field(default_factory=dict)


@dataclass
class ExternalUpdate:
    connection_details: dict[str, bytes] = field(default_factory=dict)


def as_cluster(mg: Any) -> ClusterResource:
    """Return mg as a ClusterResource, or raise NotAClusterError."""
    if not isinstance(mg, ClusterResource) or mg.kind != KIND_CLUSTER:
        raise NotAClusterError()
    return mg


def is_valid_uuid(value: str | None) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def fill_at_provider(resource: ClusterResource, cluster: Cluster) -> None:
    resource.set_at_provider(cluster.id, cluster.state)


def is_up_to_date(resource: ClusterResource, cluster: Cluster) -> bool:
    """Spend limit is the only field compared; everything else is immutable."""
    return resource.parameters.spend_limit == cluster.spend_limit


def condition_for_state(state: ClusterState) -> dict[str, Any]:
    if state == ClusterState.CREATED:
        return available()
    if state == ClusterState.CREATING:
        return creating()
    return unavailable()


def build_dsn(username: str, password: str, host: str, cluster_name: str) -> str:
    """Build the PostgreSQL DSN for a serverless cluster."""
    return (
        f"postgresql://{username}:{password}@{host}:{SQL_PORT}/{DEFAULT_DATABASE}"
        f"?sslmode=verify-full&options=--cluster%3D{cluster_name}"
    )


def get_connection_details(
    username: str,
    cluster: Cluster,
    ca: bytes,
    password: bytes,
) -> dict[str, bytes]:
    """Assemble connection details from the first region's SQL endpoint."""
    # TODO: pick the region per client once dedicated multi-region clusters are supported
    if not cluster.regions:
        raise OperatorError(f"cluster {cluster.id} reports no regions")
    host = cluster.regions[0].sql_dns
    dsn = build_dsn(username, password.decode("utf-8"), host, cluster.name)
    return {
        CONNECTION_KEY_CA_CERT: ca,
        CONNECTION_KEY_DSN: dsn.encode("utf-8"),
    }


class ExternalClient:
    """Observes, then creates, updates or deletes a CockroachDB Cloud cluster."""

    def __init__(
        self,
        backend: BackendClient,
        kube: client.CoreV1Api,
        custom_api: client.CustomObjectsApi | None = None,
    ) -> None:
        """Initialize the external client.

        Args:
            backend: Cloud API and CA certificate handles
            kube: Kubernetes core API, used for password secrets
            custom_api: Kubernetes custom objects API, used to persist the
                external name as soon as a cluster is created
        """
        self.backend = backend
        self.kube = kube
        self.custom_api = custom_api

    def close(self) -> None:
        self.backend.close()

    def observe(self, mg: Any) -> ExternalObservation:
        resource = as_cluster(mg)
        external_name = resource.external_name

        # The annotation is only set once Create succeeds; without a well-formed
        # ID a lookup could not tell "not created yet" from "not found".
        if not is_valid_uuid(external_name):
            return ExternalObservation(resource_exists=False)

        try:
            cluster = self.backend.cloud.get_cluster(external_name)
        except CloudAPIError as e:
            if e.is_not_found:
                return ExternalObservation(resource_exists=False)
            raise

        fill_at_provider(resource, cluster)

        state = cluster.lifecycle_state
        if state == ClusterState.DELETED:
            return ExternalObservation(resource_exists=False)

        condition = condition_for_state(state)
        resource.set_conditions(condition)

        up_to_date = is_up_to_date(resource, cluster)
        if not up_to_date:
            metrics.drift_detected_total.labels(kind=KIND_CLUSTER, field="spendLimit").inc()
            logger.info(
                f"Drift detected for cluster {resource.name}: spend limit "
                f"{cluster.spend_limit} != {resource.parameters.spend_limit}"
            )

        return ExternalObservation(
            resource_exists=True,
            resource_up_to_date=up_to_date,
            connection_pending=state == ClusterState.CREATED and not resource.connection_published,
            condition=condition,
        )

    def create(self, mg: Any) -> ExternalCreation:
        resource = as_cluster(mg)
        params = resource.parameters

        cluster = self.backend.cloud.create_cluster(create_cluster_request(resource.name, params))
        metrics.external_operations_total.labels(operation="create", result="success").inc()
        logger.info(f"Created cluster {cluster.id} for {resource.name}")

        # Record the ID before anything else can fail so the next Observe finds the cluster.
        resource.set_external_name(cluster.id)
        self._persist_external_name(resource)

        return self.finalize(resource, cluster)

    def finalize(self, mg: Any, cluster: Cluster | None = None) -> ExternalCreation:
        """Provision the SQL user and assemble connection details.

        Safe to repeat: the password is persisted before use and an existing
        SQL user gets its password reset to that value.
        """
        resource = as_cluster(mg)
        params = resource.parameters
        if cluster is None:
            cluster = self.backend.cloud.get_cluster(resource.external_name)

        password = resolve_password(self.kube, resource)
        self._ensure_sql_user(cluster.id, resource, password)

        ca = self.backend.ca.cluster_ca_cert(cluster.id)

        return ExternalCreation(
            connection_details=get_connection_details(params.username, cluster, ca, password),
        )

    def update(self, mg: Any) -> ExternalUpdate:
        resource = as_cluster(mg)
        external_name = resource.external_name
        if not is_valid_uuid(external_name):
            raise OperatorError(f"invalid external name {external_name!r}")

        self.backend.cloud.update_cluster(external_name, update_cluster_spec(resource.parameters))
        metrics.external_operations_total.labels(operation="update", result="success").inc()
        logger.info(f"Updated spend limit of cluster {external_name} to {resource.parameters.spend_limit}")
        return ExternalUpdate()

    def delete(self, mg: Any) -> None:
        resource = as_cluster(mg)
        external_name = resource.external_name

        self.backend.cloud.delete_cluster(external_name)
        metrics.external_operations_total.labels(operation="delete", result="success").inc()
        logger.info(f"Deleted cluster {external_name}")

    def _ensure_sql_user(self, cluster_id: str, resource: ClusterResource, password: bytes) -> None:
        params = resource.parameters
        try:
            self.backend.cloud.create_sql_user(cluster_id, create_sql_user_request(params, password.decode("utf-8")))
        except CloudAPIError as e:
            if not e.is_conflict:
                raise
            logger.info(f"SQL user {params.username} already exists on cluster {cluster_id}, resetting password")
            self.backend.cloud.update_sql_user_password(cluster_id, params.username, password.decode("utf-8"))

    def _persist_external_name(self, resource: ClusterResource) -> None:
        if self.custom_api is None:
            return
        self.custom_api.patch_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_CLUSTERS,
            name=resource.name,
            body={"metadata": {"annotations": {ANNOTATION_EXTERNAL_NAME: resource.external_name}}},
            field_manager=FIELD_MANAGER,
        )
