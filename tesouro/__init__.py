"""Tesouro: a turn-based deck engine balancing nature, infrastructure and governance."""

__version__ = "0.1.0"
