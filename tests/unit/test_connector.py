"""Tests for the Cluster connector."""

from __future__ import annotations

import base64
from unittest.mock import Mock, patch

import httpx
import pytest
from kubernetes import client

from cockroachdb_operator.builders.backend import BackendOptions, with_http_client
from cockroachdb_operator.controller.connector import (
    Connector,
    get_provider_config_with_cache,
    track_provider_config_usage,
)
from cockroachdb_operator.controller.external import ExternalClient
from cockroachdb_operator.exceptions import (
    ClientConstructionError,
    CredentialsError,
    NotAClusterError,
    ProviderConfigError,
    UsageTrackingError,
)
from cockroachdb_operator.resources.cluster import ClusterResource
from cockroachdb_operator.utils.cache import invalidate_provider_configs

PROVIDER_CONFIG = {
    "apiVersion": "cockroachdb.crossplane.io/v1alpha1",
    "kind": "ProviderConfig",
    "metadata": {"name": "default"},
    "spec": {
        "credentials": {
            "source": "Secret",
            "secretRef": {"namespace": "crossplane-system", "name": "crdb-creds", "key": "credentials"},
        }
    },
}


def make_resource(uid: str = "uid-1") -> ClusterResource:
    return ClusterResource(
        {
            "apiVersion": "cockroachdb.crossplane.io/v1alpha1",
            "kind": "Cluster",
            "metadata": {"name": "prod1", "uid": uid},
            "spec": {
                "providerConfigRef": {"name": "default"},
                "forProvider": {
                    "serverless": {"regions": ["us-central1"]},
                    "credentials": {"username": "alice"},
                },
            },
        }
    )


def make_apis(api_key: bytes = b"api-key"):
    core_api = Mock()
    secret = Mock()
    secret.data = {"credentials": base64.b64encode(api_key).decode("ascii")}
    core_api.read_namespaced_secret.return_value = secret
    custom_api = Mock()
    custom_api.get_cluster_custom_object.return_value = PROVIDER_CONFIG
    return core_api, custom_api


class TestTrackProviderConfigUsage:
    """Test cases for track_provider_config_usage function."""

    def test_creates_usage(self):
        """Test the usage object layout."""
        _, custom_api = make_apis()

        track_provider_config_usage(custom_api, make_resource())

        body = custom_api.create_cluster_custom_object.call_args[1]["body"]
        assert body["kind"] == "ProviderConfigUsage"
        assert body["metadata"]["name"] == "uid-1"
        assert body["providerConfigRef"] == {"name": "default"}
        assert body["resourceRef"]["name"] == "prod1"
        assert body["metadata"]["ownerReferences"][0]["uid"] == "uid-1"

    def test_existing_usage_is_patched(self):
        """Test that a conflict falls back to a patch."""
        _, custom_api = make_apis()
        custom_api.create_cluster_custom_object.side_effect = client.exceptions.ApiException(status=409)

        track_provider_config_usage(custom_api, make_resource())

        custom_api.patch_cluster_custom_object.assert_called_once()
        assert custom_api.patch_cluster_custom_object.call_args[1]["name"] == "uid-1"

    def test_missing_uid(self):
        """Test that a resource without uid cannot be tracked."""
        with pytest.raises(ValueError):
            track_provider_config_usage(Mock(), make_resource(uid=""))


class TestGetProviderConfigWithCache:
    """Test cases for get_provider_config_with_cache function."""

    def setup_method(self):
        """Clear cache before each test."""
        invalidate_provider_configs()

    @patch("cockroachdb_operator.controller.connector.metrics")
    def test_second_call_hits_cache(self, mock_metrics):
        """Test that the provider config is cached."""
        _, custom_api = make_apis()

        first = get_provider_config_with_cache(custom_api, "default")
        second = get_provider_config_with_cache(custom_api, "default")

        assert first == second == PROVIDER_CONFIG
        custom_api.get_cluster_custom_object.assert_called_once()
        mock_metrics.api_call_total.labels.assert_called_with(
            api_type="k8s", operation="get_provider_config", result="cache_hit"
        )


class TestConnector:
    """Test cases for Connector.connect."""

    def setup_method(self):
        """Clear cache before each test."""
        invalidate_provider_configs()

    def test_connect_builds_client(self):
        """Test a successful connect."""
        core_api, custom_api = make_apis()
        new_backend = Mock()

        external = Connector(core_api, custom_api, new_backend=new_backend).connect(make_resource())

        assert isinstance(external, ExternalClient)
        new_backend.assert_called_once_with(b"api-key", None)
        assert external.backend is new_backend.return_value

    def test_not_a_cluster(self):
        """Test that non-Cluster objects are rejected before any call."""
        core_api, custom_api = make_apis()

        with pytest.raises(NotAClusterError):
            Connector(core_api, custom_api).connect({"kind": "Cluster"})

        custom_api.create_cluster_custom_object.assert_not_called()

    def test_usage_tracking_failure(self):
        """Test that usage tracking errors are wrapped."""
        core_api, custom_api = make_apis()
        custom_api.create_cluster_custom_object.side_effect = client.exceptions.ApiException(status=403)

        with pytest.raises(UsageTrackingError, match="cannot track ProviderConfig usage") as exc_info:
            Connector(core_api, custom_api).connect(make_resource())

        assert exc_info.value.step == "track"

    def test_provider_config_failure(self):
        """Test that provider config errors are wrapped."""
        core_api, custom_api = make_apis()
        custom_api.get_cluster_custom_object.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(ProviderConfigError, match="cannot get ProviderConfig"):
            Connector(core_api, custom_api).connect(make_resource())

    def test_credentials_failure(self):
        """Test that credential errors are wrapped."""
        core_api, custom_api = make_apis()
        core_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(CredentialsError, match="cannot get credentials"):
            Connector(core_api, custom_api).connect(make_resource())

    def test_client_construction_failure(self):
        """Test that backend construction errors are wrapped."""
        core_api, custom_api = make_apis(api_key=b"   ")

        with pytest.raises(ClientConstructionError, match="cannot create new Service"):
            Connector(core_api, custom_api).connect(make_resource())

    def test_injected_http_client_survives_close(self):
        """Test that a caller-supplied httpx client is reused across passes."""
        core_api, custom_api = make_apis()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"PEM")

        http = httpx.Client(transport=httpx.MockTransport(handler))
        connector = Connector(core_api, custom_api, backend_options=with_http_client(BackendOptions(), http))

        for _ in range(2):
            external = connector.connect(make_resource())
            assert external.backend.ca.cluster_ca_cert("abc") == b"PEM"
            external.close()

        assert not http.is_closed
