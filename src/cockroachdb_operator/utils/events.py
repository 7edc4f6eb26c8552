"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CANNOT_CONNECT,
    EVENT_REASON_CLUSTER_CREATED,
    EVENT_REASON_CLUSTER_DELETED,
    EVENT_REASON_CLUSTER_UPDATED,
    EVENT_REASON_CONNECTION_PUBLISHED,
    EVENT_REASON_RECONCILE_FAILED,
)


def emit_event(
    body: Any,
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body the event is attached to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: Any, message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_cannot_connect(body: Any, message: str) -> None:
    """Emit provider connection failure event."""
    emit_event(body, EVENT_REASON_CANNOT_CONNECT, message, type_="Warning")


def emit_cluster_created(body: Any, cluster_id: str) -> None:
    """Emit cluster created event."""
    emit_event(body, EVENT_REASON_CLUSTER_CREATED, f"Cluster {cluster_id} created")


def emit_cluster_updated(body: Any, cluster_id: str) -> None:
    """Emit cluster updated event."""
    emit_event(body, EVENT_REASON_CLUSTER_UPDATED, f"Cluster {cluster_id} updated")


def emit_cluster_deleted(body: Any, cluster_id: str) -> None:
    """Emit cluster deleted event."""
    emit_event(body, EVENT_REASON_CLUSTER_DELETED, f"Cluster {cluster_id} deleted")


def emit_connection_published(body: Any, secret_name: str) -> None:
    """Emit connection details published event."""
    emit_event(body, EVENT_REASON_CONNECTION_PUBLISHED, f"Connection details written to secret {secret_name}")
