"""Shared utilities for handlers."""

from __future__ import annotations

from kubernetes import client, config


def load_kube_config() -> None:
    """Load in-cluster config, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def get_k8s_clients() -> tuple[client.CoreV1Api, client.CustomObjectsApi]:
    """Get Kubernetes CoreV1Api and CustomObjectsApi clients.

    Returns:
        Tuple of (CoreV1Api, CustomObjectsApi)
    """
    load_kube_config()
    return client.CoreV1Api(), client.CustomObjectsApi()
