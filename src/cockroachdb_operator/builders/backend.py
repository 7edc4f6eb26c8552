"""Builder for the backend client used by the cluster controller."""

from __future__ import annotations

from dataclasses import dataclass, replace

import httpx

from .. import config
from ..services.ca.client import CACertFetcher
from ..services.cockroach.base import CACertSource, CloudService
from ..services.cockroach.client import CockroachCloudClient


@dataclass(frozen=True)
class BackendOptions:
    """Options for building a BackendClient.

    Attributes:
        api_base_url: Base URL of the CockroachDB Cloud API (default: COCKROACH_API_URL)
        ca_base_url: Base URL of the CA certificate endpoint (default: COCKROACH_CA_URL)
        timeout: Per-request timeout in seconds (default: COCKROACH_API_TIMEOUT_SECONDS)
        api_http_client: httpx client for API calls; a new one is created when None
        ca_http_client: httpx client for CA certificate calls; a new one is created when None
    """

    api_base_url: str = config.COCKROACH_API_URL
    ca_base_url: str = config.COCKROACH_CA_URL
    timeout: float = config.COCKROACH_API_TIMEOUT_SECONDS
    api_http_client: httpx.Client | None = None
    ca_http_client: httpx.Client | None = None


def _validate_url(url: str) -> str:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ValueError(f"error parsing URL: {url!r}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"error parsing URL: {url!r}")
    return url


def with_api_base_url(options: BackendOptions, url: str) -> BackendOptions:
    """Return options with a different API base URL."""
    return replace(options, api_base_url=_validate_url(url))


def with_ca_base_url(options: BackendOptions, url: str) -> BackendOptions:
    """Return options with a different CA certificate base URL."""
    return replace(options, ca_base_url=_validate_url(url))


def with_timeout(options: BackendOptions, timeout: float) -> BackendOptions:
    """Return options with a different request timeout."""
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    return replace(options, timeout=timeout)


def with_http_client(
    options: BackendOptions,
    http_client: httpx.Client,
    ca_http_client: httpx.Client | None = None,
) -> BackendOptions:
    """Return options using the given httpx client(s).

    The API client is reused for CA certificate requests unless a separate
    one is given. Clients passed here stay open when a BackendClient built
    from these options is closed; the caller owns them.
    """
    if http_client is None:
        raise ValueError("http client must not be None")
    return replace(options, api_http_client=http_client, ca_http_client=ca_http_client or http_client)


@dataclass(frozen=True)
class BackendClient:
    """Handles to the cloud API and the CA certificate endpoint.

    Holds no per-resource state and may be shared by reconciliations.
    """

    cloud: CloudService
    ca: CACertSource

    def close(self) -> None:
        for handle in (self.cloud, self.ca):
            close = getattr(handle, "close", None)
            if close is not None:
                close()


def create_backend_from_credentials(
    creds: bytes,
    options: BackendOptions | None = None,
) -> BackendClient:
    """Create a backend client from raw credential bytes.

    Args:
        creds: API key as extracted from the provider config credentials
        options: Backend options; defaults apply when None

    Returns:
        Configured backend client

    Raises:
        ValueError: If the credentials are empty or an option is invalid
    """
    options = options or BackendOptions()
    api_key = creds.decode("utf-8").strip()
    if not api_key:
        raise ValueError("credentials must not be empty")

    cloud = CockroachCloudClient(
        api_key=api_key,
        base_url=_validate_url(options.api_base_url),
        timeout=options.timeout,
        http_client=options.api_http_client,
    )
    ca = CACertFetcher(
        base_url=_validate_url(options.ca_base_url),
        http_client=options.ca_http_client,
        timeout=options.timeout,
    )
    return BackendClient(cloud=cloud, ca=ca)
