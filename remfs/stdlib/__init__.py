"""Standard adapters shipped with remfs."""
