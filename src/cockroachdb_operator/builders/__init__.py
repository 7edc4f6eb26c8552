"""Builders for backend clients and cluster requests."""
