"""Tests for the cluster CA certificate fetcher."""

from __future__ import annotations

import httpx
import pytest

from cockroachdb_operator.exceptions import CACertError
from cockroachdb_operator.services.ca.client import DEFAULT_CA_URL, CACertFetcher

CLUSTER_ID = "0b0e9d0e-6a51-4c7b-8a0b-2a3c0f1f4e11"
PEM = b"-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"


def make_fetcher(handler, base_url: str = DEFAULT_CA_URL) -> CACertFetcher:
    """Build a fetcher whose requests are answered by handler."""
    return CACertFetcher(base_url=base_url, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestCACertFetcher:
    """Test cases for CACertFetcher."""

    def test_default_url(self):
        """Test the certificate URL against the default host."""
        fetcher = CACertFetcher()

        assert fetcher.cert_url(CLUSTER_ID) == f"https://cockroachlabs.cloud/clusters/{CLUSTER_ID}/cert"

    def test_configured_base_url_is_used(self):
        """Test that a configured base URL is honored."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, content=PEM)

        cert = make_fetcher(handler, base_url="https://ca.example.com/certs").cluster_ca_cert(CLUSTER_ID)

        assert cert == PEM
        assert seen["url"] == f"https://ca.example.com/certs/clusters/{CLUSTER_ID}/cert"

    def test_invalid_base_url(self):
        """Test that an unparsable base URL is rejected."""
        with pytest.raises(ValueError, match="error parsing base URL"):
            CACertFetcher(base_url="ftp://ca.example.com/")

    def test_non_200_status(self):
        """Test that any non-200 status is an error naming the status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        with pytest.raises(CACertError, match="status code 503") as exc_info:
            make_fetcher(handler).cluster_ca_cert(CLUSTER_ID)

        assert exc_info.value.status_code == 503

    def test_redirect_status_is_not_followed(self):
        """Test that a 3xx answer is treated as failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "https://elsewhere.example.com/"})

        with pytest.raises(CACertError, match="status code 302"):
            make_fetcher(handler).cluster_ca_cert(CLUSTER_ID)

    def test_transport_error(self):
        """Test that transport failures are wrapped."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(CACertError, match="error requesting CA cert"):
            make_fetcher(handler).cluster_ca_cert(CLUSTER_ID)

    def test_close_leaves_injected_client_open(self):
        """Test that close only closes a client the fetcher created."""
        http = httpx.Client()
        CACertFetcher(http_client=http).close()
        assert not http.is_closed

        fetcher = CACertFetcher()
        fetcher.close()
        assert fetcher._http.is_closed
