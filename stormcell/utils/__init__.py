"""Shared helpers for the storm animation."""
