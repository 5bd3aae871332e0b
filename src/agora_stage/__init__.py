"""Agora Stage: content lifecycle and notification fan-out for community forums."""

__version__ = "0.1.0"
