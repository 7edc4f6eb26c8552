"""Models for CockroachDB Cloud API operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CloudProvider(str, Enum):
    """Cloud provider a cluster runs on."""

    UNSPECIFIED = "CLOUD_PROVIDER_UNSPECIFIED"
    GCP = "GCP"
    AWS = "AWS"

    @classmethod
    def parse(cls, value: str) -> CloudProvider:
        """Parse a provider name; UNSPECIFIED is accepted as a shorthand."""
        if value == "UNSPECIFIED":
            return cls.UNSPECIFIED
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"provider '{value}' not supported") from None


class ClusterState(str, Enum):
    """Lifecycle state reported by the API for a cluster."""

    UNSPECIFIED = "CLUSTER_STATE_UNSPECIFIED"
    CREATING = "CREATING"
    CREATED = "CREATED"
    CREATION_FAILED = "CREATION_FAILED"
    DELETED = "DELETED"
    LOCKED = "LOCKED"

    @classmethod
    def parse(cls, value: str | None) -> ClusterState:
        """Parse a state string, mapping anything unknown to UNSPECIFIED."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNSPECIFIED


@dataclass
class Region:
    """A region a cluster serves SQL traffic from."""

    name: str
    sql_dns: str = ""
    ui_dns: str = ""
    node_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Region:
        return cls(
            name=data.get("name", ""),
            sql_dns=data.get("sql_dns", ""),
            ui_dns=data.get("ui_dns", ""),
            node_count=int(data.get("node_count") or 0),
        )


@dataclass
class Cluster:
    """A cluster as returned by the CockroachDB Cloud API."""

    id: str
    name: str
    state: str = ClusterState.UNSPECIFIED.value
    cloud_provider: str = CloudProvider.UNSPECIFIED.value
    cockroach_version: str = ""
    plan: str = ""
    spend_limit: int = 0
    regions: list[Region] = field(default_factory=list)

    @property
    def lifecycle_state(self) -> ClusterState:
        return ClusterState.parse(self.state)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cluster:
        """Build a Cluster from an API response body."""
        serverless = (data.get("config") or {}).get("serverless") or {}
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            state=data.get("state") or ClusterState.UNSPECIFIED.value,
            cloud_provider=data.get("cloud_provider") or CloudProvider.UNSPECIFIED.value,
            cockroach_version=data.get("cockroach_version", ""),
            plan=data.get("plan", ""),
            spend_limit=int(serverless.get("spend_limit") or 0),
            regions=[Region.from_dict(r) for r in data.get("regions") or []],
        )


@dataclass
class CreateClusterRequest:
    """Request body for creating a serverless cluster."""

    name: str
    provider: CloudProvider
    regions: list[str]
    spend_limit: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "provider": self.provider.value,
            "spec": {
                "serverless": {
                    "regions": list(self.regions),
                    "spend_limit": self.spend_limit,
                },
            },
        }


@dataclass
class UpdateClusterSpecification:
    """Request body for updating a serverless cluster."""

    spend_limit: int

    def to_dict(self) -> dict[str, Any]:
        return {"serverless": {"spend_limit": self.spend_limit}}


@dataclass
class CreateSQLUserRequest:
    """Request body for creating a SQL user."""

    name: str
    password: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "password": self.password}

    def __repr__(self) -> str:
        return f"CreateSQLUserRequest(name={self.name!r}, password='***')"
