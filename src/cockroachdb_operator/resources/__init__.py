"""Kubernetes resource wrappers."""
