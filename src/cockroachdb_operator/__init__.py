"""Kubernetes operator for CockroachDB Cloud serverless clusters."""

__version__ = "0.1.0"
