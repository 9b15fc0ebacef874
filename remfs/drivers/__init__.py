"""Concrete drivers for remfs ports."""
