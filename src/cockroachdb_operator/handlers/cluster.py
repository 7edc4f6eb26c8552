"""Handler for Cluster CRD."""

from __future__ import annotations

from typing import Any, Callable

import kopf
from kubernetes import client

from .. import config
from ..constants import API_GROUP_VERSION, KIND_CLUSTER
from ..controller.connector import Connector
from ..controller.external import ExternalClient
from ..exceptions import ConnectError, NotAClusterError
from ..resources.cluster import ClusterResource
from ..tracing import trace_span
from ..utils.conditions import creating, deleting, reconcile_error, reconcile_success
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_cannot_connect,
    emit_cluster_created,
    emit_cluster_deleted,
    emit_cluster_updated,
    emit_connection_published,
)
from ..utils.secrets import upsert_secret
from .base import BaseHandler
from .shared import get_k8s_clients

ClientsFactory = Callable[[], "tuple[client.CoreV1Api, client.CustomObjectsApi]"]

DELETION_POLL_SECONDS = 10


class ClusterHandler(BaseHandler):
    """Drives the external client for Cluster resources.

    Each pass connects, observes, and then creates, finalizes, updates or
    deletes. Errors are reported on the Synced condition and handed back to
    kopf, which owns retries and backoff.
    """

    def __init__(self, clients_factory: ClientsFactory = get_k8s_clients):
        """Initialize cluster handler."""
        super().__init__(KIND_CLUSTER)
        self.clients_factory = clients_factory

    def _connect(
        self,
        body: Any,
        resource: ClusterResource,
        core_api: client.CoreV1Api,
        custom_api: client.CustomObjectsApi,
    ) -> ExternalClient:
        try:
            return Connector(core_api, custom_api).connect(resource)
        except NotAClusterError as e:
            raise kopf.PermanentError(str(e)) from e
        except ConnectError as e:
            message = sanitize_exception(e)
            self.log_error(resource.meta, message, error=e, reason="CannotConnect", step=e.step)
            emit_cannot_connect(body, message)
            resource.set_conditions(reconcile_error(message))
            raise kopf.TemporaryError(message) from e

    def _fail(self, resource: ClusterResource, error: Exception) -> None:
        message = sanitize_exception(error)
        resource.set_conditions(reconcile_error(message))
        raise kopf.TemporaryError(message) from error

    def publish_connection_details(
        self,
        body: Any,
        core_api: client.CoreV1Api,
        resource: ClusterResource,
        details: dict[str, bytes],
    ) -> None:
        """Write connection details to spec.writeConnectionSecretToRef, if set."""
        ref = resource.connection_secret_ref
        if ref is None:
            self.log_warning(
                resource.meta,
                "No writeConnectionSecretToRef set, connection details discarded",
                reason="NoConnectionSecret",
            )
            return

        upsert_secret(
            core_api,
            ref["namespace"],
            ref["name"],
            details,
            owner_references=[resource.owner_reference()],
        )
        emit_connection_published(body, ref["name"])
        self.log_info(
            resource.meta,
            f"Published connection details to {ref['namespace']}/{ref['name']}",
            reason="ConnectionPublished",
        )

    def reconcile(self, body: Any, patch: kopf.Patch) -> None:
        """Reconcile a Cluster resource."""
        resource = ClusterResource(body, patch)

        with trace_span("reconcile_cluster", kind=KIND_CLUSTER, attributes={"cluster.name": resource.name}):
            try:
                resource.parameters
            except ValueError as e:
                resource.set_conditions(reconcile_error(str(e)))
                self.log_error(resource.meta, f"Invalid spec: {e}", reason="ValidationFailed")
                raise kopf.PermanentError(str(e)) from e

            core_api, custom_api = self.clients_factory()
            external = self._connect(body, resource, core_api, custom_api)

            try:
                observation = external.observe(resource)

                if not observation.resource_exists:
                    with trace_span("create_cluster", kind=KIND_CLUSTER):
                        creation = external.create(resource)
                    emit_cluster_created(body, resource.external_name)
                    self.log_info(
                        resource.meta,
                        f"Created cluster {resource.external_name}",
                        reason="Created",
                        external_name=resource.external_name,
                    )
                    resource.set_conditions(creating())
                    self.publish_connection_details(body, core_api, resource, creation.connection_details)
                    resource.mark_connection_published()
                    resource.set_conditions(reconcile_success())
                    return

                if observation.connection_pending:
                    with trace_span("finalize_cluster", kind=KIND_CLUSTER):
                        creation = external.finalize(resource)
                    self.publish_connection_details(body, core_api, resource, creation.connection_details)
                    resource.mark_connection_published()

                if not observation.resource_up_to_date:
                    with trace_span("update_cluster", kind=KIND_CLUSTER):
                        external.update(resource)
                    emit_cluster_updated(body, resource.external_name)
                    self.log_info(
                        resource.meta,
                        f"Updated cluster {resource.external_name}",
                        reason="Updated",
                        spend_limit=resource.parameters.spend_limit,
                    )

                resource.set_conditions(reconcile_success())
            except Exception as e:
                self._fail(resource, e)
            finally:
                external.close()

    def delete(self, body: Any, patch: kopf.Patch) -> None:
        """Delete the external cluster, then release the finalizer."""
        resource = ClusterResource(body, patch)

        with trace_span("delete_cluster", kind=KIND_CLUSTER, attributes={"cluster.name": resource.name}):
            if not resource.external_name:
                self.log_info(resource.meta, "No external cluster recorded, nothing to delete", reason="Deletion")
                self.remove_finalizer(resource.meta, patch)
                return

            core_api, custom_api = self.clients_factory()
            external = self._connect(body, resource, core_api, custom_api)

            try:
                observation = external.observe(resource)
                resource.set_conditions(deleting())
                if observation.resource_exists:
                    external.delete(resource)
                    emit_cluster_deleted(body, resource.external_name)
                    self.log_info(
                        resource.meta,
                        f"Deletion of cluster {resource.external_name} requested",
                        reason="Deleting",
                    )
                    raise kopf.TemporaryError(
                        f"waiting for cluster {resource.external_name} to be deleted",
                        delay=DELETION_POLL_SECONDS,
                    )
            except kopf.TemporaryError:
                raise
            except Exception as e:
                self._fail(resource, e)
            finally:
                external.close()

            self.log_info(resource.meta, "External cluster is gone", event="deletion", reason="Deleted")
            self.remove_finalizer(resource.meta, patch)


# Global handler instance
_handler = ClusterHandler()


@kopf.timer(API_GROUP_VERSION, KIND_CLUSTER, interval=config.POLL_INTERVAL_SECONDS, initial_delay=0)
def handle_cluster(
    body: kopf.Body,
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Reconcile a Cluster resource on a schedule until it converges, and after."""
    if meta.get("deletionTimestamp"):
        return
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(body, lambda: _handler.reconcile(body, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_CLUSTER)
def handle_cluster_delete(
    body: kopf.Body,
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Cluster resource deletion."""
    _handler.reconcile_with_metrics(body, lambda: _handler.delete(body, patch))
