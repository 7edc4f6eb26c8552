"""Environment-driven configuration for the CockroachDB Operator."""

from __future__ import annotations

import os

# CockroachDB Cloud API
COCKROACH_API_URL = os.getenv("COCKROACH_API_URL", "https://cockroachlabs.cloud")
COCKROACH_CA_URL = os.getenv("COCKROACH_CA_URL", "https://cockroachlabs.cloud/")
COCKROACH_API_TIMEOUT_SECONDS = float(os.getenv("COCKROACH_API_TIMEOUT_SECONDS", "30.0"))

# Reconciliation
POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", "60"))
DEFAULT_SECRET_NAMESPACE = os.getenv("DEFAULT_SECRET_NAMESPACE", "crossplane-system")

# Serving
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))

# Kubernetes reads
K8S_CACHE_TTL_SECONDS = float(os.getenv("K8S_CACHE_TTL_SECONDS", "30.0"))
