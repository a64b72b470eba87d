"""Grimoire registry: per-project knowledge for coding agents."""

__version__ = "0.1.0"
