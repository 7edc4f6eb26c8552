"""Clients for the CockroachDB Cloud services."""
