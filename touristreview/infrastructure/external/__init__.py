"""Adapters for external services (object storage, map search)."""
