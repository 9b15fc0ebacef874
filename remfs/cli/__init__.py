"""Command-line interface for remfs."""
