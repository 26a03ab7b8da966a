"""Agora community discussion backend."""

__version__ = "0.1.0"
