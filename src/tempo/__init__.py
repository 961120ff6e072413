"""Tempo - recurring schedule registration for named resources."""

__version__ = "0.1.0"
