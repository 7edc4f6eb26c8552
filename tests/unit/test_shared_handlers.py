"""Tests for shared handler utilities."""

from __future__ import annotations

from unittest.mock import patch

from kubernetes import config

from cockroachdb_operator.handlers.shared import get_k8s_clients, load_kube_config


class TestLoadKubeConfig:
    """Test cases for load_kube_config function."""

    @patch("cockroachdb_operator.handlers.shared.config.load_kube_config")
    @patch("cockroachdb_operator.handlers.shared.config.load_incluster_config")
    def test_in_cluster(self, mock_incluster, mock_kubeconfig):
        """Test that in-cluster config is preferred."""
        load_kube_config()

        mock_incluster.assert_called_once()
        mock_kubeconfig.assert_not_called()

    @patch("cockroachdb_operator.handlers.shared.config.load_kube_config")
    @patch("cockroachdb_operator.handlers.shared.config.load_incluster_config")
    def test_falls_back_to_kubeconfig(self, mock_incluster, mock_kubeconfig):
        """Test fallback to the local kubeconfig."""
        mock_incluster.side_effect = config.ConfigException("not in cluster")

        load_kube_config()

        mock_kubeconfig.assert_called_once()


class TestGetK8sClients:
    """Test cases for get_k8s_clients function."""

    @patch("cockroachdb_operator.handlers.shared.client.CustomObjectsApi")
    @patch("cockroachdb_operator.handlers.shared.client.CoreV1Api")
    @patch("cockroachdb_operator.handlers.shared.load_kube_config")
    def test_returns_core_and_custom(self, mock_load, mock_core, mock_custom):
        """Test that both API clients are returned."""
        core, custom = get_k8s_clients()

        mock_load.assert_called_once()
        assert core is mock_core.return_value
        assert custom is mock_custom.return_value
