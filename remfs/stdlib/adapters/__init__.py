"""Bundled adapters."""
