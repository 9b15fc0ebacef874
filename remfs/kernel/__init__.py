"""Kernel: exceptions, logging, configuration, domain models and ports."""
