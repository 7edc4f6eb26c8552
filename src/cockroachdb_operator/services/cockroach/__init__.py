"""CockroachDB Cloud API client."""

from .client import CockroachCloudClient
from .models import Cluster, ClusterState, CloudProvider

__all__ = ["CockroachCloudClient", "Cluster", "ClusterState", "CloudProvider"]
