"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_READY,
    COND_SYNCED,
    REASON_AVAILABLE,
    REASON_CREATING,
    REASON_DELETING,
    REASON_RECONCILE_ERROR,
    REASON_RECONCILE_SUCCESS,
    REASON_UNAVAILABLE,
)


def new_condition(condition_type: str, status: str, reason: str, message: str = "") -> dict[str, Any]:
    """Build a condition dict stamped with the current time."""
    condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "lastTransitionTime": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        condition["message"] = message
    return condition


def update_condition(
    conditions: list[dict[str, Any]],
    condition: dict[str, Any],
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    The existing lastTransitionTime is kept when status and reason are unchanged.

    Args:
        conditions: List of existing conditions
        condition: Condition to set

    Returns:
        Updated list of conditions
    """
    updated = [dict(c) for c in conditions]
    for idx, existing in enumerate(updated):
        if existing.get("type") != condition["type"]:
            continue
        new = dict(condition)
        if existing.get("status") == new["status"] and existing.get("reason") == new["reason"]:
            new["lastTransitionTime"] = existing.get("lastTransitionTime", new["lastTransitionTime"])
        updated[idx] = new
        return updated

    updated.append(dict(condition))
    return updated


def get_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition of the given type, if present."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def available() -> dict[str, Any]:
    """Ready condition for an external resource that is available for use."""
    return new_condition(COND_READY, "True", REASON_AVAILABLE)


def creating() -> dict[str, Any]:
    """Ready condition for an external resource that is being created."""
    return new_condition(COND_READY, "False", REASON_CREATING)


def unavailable() -> dict[str, Any]:
    """Ready condition for an external resource that exists but is not usable."""
    return new_condition(COND_READY, "False", REASON_UNAVAILABLE)


def deleting() -> dict[str, Any]:
    """Ready condition for an external resource that is being deleted."""
    return new_condition(COND_READY, "False", REASON_DELETING)


def reconcile_success() -> dict[str, Any]:
    """Synced condition for a successful reconciliation."""
    return new_condition(COND_SYNCED, "True", REASON_RECONCILE_SUCCESS)


def reconcile_error(message: str) -> dict[str, Any]:
    """Synced condition for a failed reconciliation."""
    return new_condition(COND_SYNCED, "False", REASON_RECONCILE_ERROR, message)
