"""Cluster CA certificate client."""

from .client import DEFAULT_CA_URL, CACertFetcher

__all__ = ["CACertFetcher", "DEFAULT_CA_URL"]
