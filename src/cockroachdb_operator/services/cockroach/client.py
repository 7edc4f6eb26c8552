"""CockroachDB Cloud API client implementation."""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from ... import metrics
from ...exceptions import CloudAPIError, CloudTransportError
from .models import Cluster, CreateClusterRequest, CreateSQLUserRequest, UpdateClusterSpecification

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://cockroachlabs.cloud"
API_PREFIX = "/api/v1"
JSON_MEDIA_TYPE = "application/json"


class CockroachCloudClient:
    """Client for the CockroachDB Cloud REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            api_key: Service account API key, sent as a bearer token
            base_url: Base URL of the API host
            timeout: Request timeout in seconds, used when no http_client is given
            http_client: Optional pre-built httpx client (e.g. with a mock transport)
        """
        if not api_key:
            raise ValueError("api key must not be empty")

        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Raises:
            CloudTransportError: If the request cannot be sent or the response cannot be decoded
            CloudAPIError: If the API answers with a status >= 400
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": JSON_MEDIA_TYPE,
            "Content-Type": JSON_MEDIA_TYPE,
        }

        start_time = time.time()
        try:
            response = self._http.request(method, self._url(path), headers=headers, json=body)
        except httpx.HTTPError as e:
            metrics.api_call_total.labels(api_type="cockroach", operation=operation, result="error").inc()
            raise CloudTransportError(f"error making request: {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="cockroach", operation=operation).observe(duration)

        logger.debug(f"{method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            metrics.api_call_total.labels(api_type="cockroach", operation=operation, result="error").inc()
            raise self._error_from_response(response)

        metrics.api_call_total.labels(api_type="cockroach", operation=operation, result="success").inc()

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CloudTransportError(f"error decoding response: {e}") from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> CloudAPIError:
        """Decode an API error body of the form {"code": ..., "message": ...}."""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            message = payload.get("message") or response.reason_phrase
            code = payload.get("code") or 0
        else:
            message = response.text or response.reason_phrase
            code = 0
        return CloudAPIError(status_code=response.status_code, message=message, code=code)

    def get_cluster(self, cluster_id: str) -> Cluster:
        """Get a cluster by ID."""
        data = self._request("GET", f"/clusters/{quote(cluster_id, safe='')}", "get_cluster")
        return Cluster.from_dict(data or {})

    def create_cluster(self, request: CreateClusterRequest) -> Cluster:
        """Create a cluster."""
        data = self._request("POST", "/clusters", "create_cluster", body=request.to_dict())
        return Cluster.from_dict(data or {})

    def update_cluster(self, cluster_id: str, spec: UpdateClusterSpecification) -> Cluster:
        """Update the mutable configuration of a cluster."""
        data = self._request(
            "PATCH", f"/clusters/{quote(cluster_id, safe='')}", "update_cluster", body=spec.to_dict()
        )
        return Cluster.from_dict(data or {})

    def delete_cluster(self, cluster_id: str) -> Cluster:
        """Delete a cluster."""
        data = self._request("DELETE", f"/clusters/{quote(cluster_id, safe='')}", "delete_cluster")
        return Cluster.from_dict(data or {})

    def create_sql_user(self, cluster_id: str, request: CreateSQLUserRequest) -> None:
        """Create a SQL user on a cluster."""
        self._request(
            "POST",
            f"/clusters/{quote(cluster_id, safe='')}/sql-users",
            "create_sql_user",
            body=request.to_dict(),
        )

    def update_sql_user_password(self, cluster_id: str, name: str, password: str) -> None:
        """Set the password of an existing SQL user."""
        self._request(
            "PUT",
            f"/clusters/{quote(cluster_id, safe='')}/sql-users/{quote(name, safe='')}/password",
            "update_sql_user_password",
            body={"password": password},
        )
