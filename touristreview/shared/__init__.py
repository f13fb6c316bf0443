"""Shared utilities used across layers (datetime, ids, logging)."""
