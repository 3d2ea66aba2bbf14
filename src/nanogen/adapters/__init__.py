"""Persistence and runtime adapters."""
