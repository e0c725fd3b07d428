"""Sahay wellness backend."""

__version__ = "0.1.0"
