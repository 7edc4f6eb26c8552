"""Reconciliation core for Cluster managed resources."""

from .connector import Connector
from .external import ExternalClient, ExternalCreation, ExternalObservation, ExternalUpdate

__all__ = ["Connector", "ExternalClient", "ExternalCreation", "ExternalObservation", "ExternalUpdate"]
