"""Client for the CockroachDB Cloud cluster CA certificate endpoint."""

from __future__ import annotations

import logging
import time
from urllib.parse import quote, urljoin

import httpx

from ... import metrics
from ...exceptions import CACertError

logger = logging.getLogger(__name__)

DEFAULT_CA_URL = "https://cockroachlabs.cloud/"


class CACertFetcher:
    """Fetches cluster CA certificates.

    The certificate endpoint lives outside the versioned API and needs no
    authentication: ``GET {base_url}clusters/{cluster_id}/cert``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_CA_URL,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the fetcher.

        Args:
            base_url: Base URL of the certificate endpoint (default: https://cockroachlabs.cloud/)
            http_client: Optional pre-built httpx client
            timeout: Request timeout in seconds, used when no http_client is given
        """
        try:
            parsed = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"error parsing base URL: {base_url!r}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"error parsing base URL: {base_url!r}")

        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def cert_url(self, cluster_id: str) -> str:
        """Return the certificate URL for a cluster."""
        return urljoin(self.base_url, f"clusters/{quote(cluster_id, safe='')}/cert")

    def cluster_ca_cert(self, cluster_id: str) -> bytes:
        """Return the CA certificate of a cluster.

        Args:
            cluster_id: External ID of the cluster

        Returns:
            Raw certificate bytes

        Raises:
            CACertError: On transport failure or any non-200 response
        """
        start_time = time.time()
        try:
            response = self._http.get(self.cert_url(cluster_id))
        except httpx.HTTPError as e:
            metrics.api_call_total.labels(api_type="ca", operation="get_ca_cert", result="error").inc()
            raise CACertError(f"error requesting CA cert: {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="ca", operation="get_ca_cert").observe(duration)

        if response.status_code != 200:
            metrics.api_call_total.labels(api_type="ca", operation="get_ca_cert", result="error").inc()
            raise CACertError(
                f"error requesting CA cert: status code {response.status_code}",
                status_code=response.status_code,
            )

        metrics.api_call_total.labels(api_type="ca", operation="get_ca_cert", result="success").inc()
        logger.debug(f"Fetched CA certificate for cluster {cluster_id}")
        return response.content
