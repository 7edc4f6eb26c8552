"""Base CockroachDB Cloud service interface."""

from __future__ import annotations

from typing import Protocol

from .models import Cluster, CreateClusterRequest, CreateSQLUserRequest, UpdateClusterSpecification


class CloudService(Protocol):
    """Protocol defining the cluster operations the controller relies on."""

    def get_cluster(self, cluster_id: str) -> Cluster:
        """Get a cluster by ID."""
        ...

    def create_cluster(self, request: CreateClusterRequest) -> Cluster:
        """Create a cluster."""
        ...

    def update_cluster(self, cluster_id: str, spec: UpdateClusterSpecification) -> Cluster:
        """Update the mutable configuration of a cluster."""
        ...

    def delete_cluster(self, cluster_id: str) -> Cluster:
        """Delete a cluster."""
        ...

    def create_sql_user(self, cluster_id: str, request: CreateSQLUserRequest) -> None:
        """Create a SQL user on a cluster."""
        ...

    def update_sql_user_password(self, cluster_id: str, name: str, password: str) -> None:
        """Set the password of an existing SQL user."""
        ...


class CACertSource(Protocol):
    """Protocol for retrieving a cluster's CA certificate."""

    def cluster_ca_cert(self, cluster_id: str) -> bytes:
        """Return the PEM-encoded CA certificate of a cluster."""
        ...
