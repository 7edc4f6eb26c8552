"""Wrapper around a Cluster managed resource body."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import kopf

from ..builders.cluster import ClusterParameters, create_cluster_parameters_from_spec
from ..constants import ANNOTATION_CONNECTION_PUBLISHED, ANNOTATION_EXTERNAL_NAME
from ..utils.conditions import update_condition


def _plain(value: Any) -> Any:
    """Recursively copy kopf body views into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class ClusterResource:
    """A Cluster managed resource.

    Reads come from a plain copy of the body; every write is applied to the
    copy and recorded on the kopf patch so kopf persists it after the handler.
    """

    def __init__(self, body: Mapping[str, Any], patch: kopf.Patch | None = None):
        data = _plain(body)
        self.api_version: str = data.get("apiVersion", "")
        self.kind: str = data.get("kind", "")
        self.meta: dict[str, Any] = data.get("metadata") or {}
        self.meta["annotations"] = self.meta.get("annotations") or {}
        self.spec: dict[str, Any] = data.get("spec") or {}
        self.status: dict[str, Any] = data.get("status") or {}
        self.patch = patch if patch is not None else kopf.Patch()
        self._parameters: ClusterParameters | None = None

    @property
    def name(self) -> str:
        return self.meta.get("name", "")

    @property
    def uid(self) -> str:
        return self.meta.get("uid", "")

    @property
    def annotations(self) -> dict[str, str]:
        return self.meta["annotations"]

    @property
    def external_name(self) -> str:
        return self.annotations.get(ANNOTATION_EXTERNAL_NAME, "") or ""

    def set_external_name(self, value: str) -> None:
        self.meta["annotations"][ANNOTATION_EXTERNAL_NAME] = value
        self.patch.metadata.annotations[ANNOTATION_EXTERNAL_NAME] = value

    @property
    def connection_published(self) -> bool:
        return self.annotations.get(ANNOTATION_CONNECTION_PUBLISHED) == "true"

    def mark_connection_published(self) -> None:
        self.meta["annotations"][ANNOTATION_CONNECTION_PUBLISHED] = "true"
        self.patch.metadata.annotations[ANNOTATION_CONNECTION_PUBLISHED] = "true"

    @property
    def parameters(self) -> ClusterParameters:
        """Resolved spec.forProvider.

        Raises:
            ValueError: If the spec is invalid
        """
        if self._parameters is None:
            self._parameters = create_cluster_parameters_from_spec(self.spec)
        return self._parameters

    @property
    def provider_config_name(self) -> str:
        return (self.spec.get("providerConfigRef") or {}).get("name") or "default"

    @property
    def connection_secret_ref(self) -> dict[str, str] | None:
        """spec.writeConnectionSecretToRef, or None when not set."""
        ref = self.spec.get("writeConnectionSecretToRef") or {}
        if not ref.get("name") or not ref.get("namespace"):
            return None
        return {"name": ref["name"], "namespace": ref["namespace"]}

    def owner_reference(self) -> dict[str, Any]:
        """Owner reference pointing at this resource."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": True,
            "blockOwnerDeletion": True,
        }

    @property
    def at_provider(self) -> dict[str, Any]:
        return self.status.get("atProvider") or {}

    def set_at_provider(self, cluster_id: str, state: str) -> None:
        at_provider = {"id": cluster_id, "state": state}
        self.status["atProvider"] = at_provider
        self.patch.status["atProvider"] = at_provider

    @property
    def conditions(self) -> list[dict[str, Any]]:
        return self.status.get("conditions") or []

    def set_conditions(self, *conditions: dict[str, Any]) -> None:
        merged = self.conditions
        for condition in conditions:
            merged = update_condition(merged, condition)
        self.status["conditions"] = merged
        self.patch.status["conditions"] = merged
