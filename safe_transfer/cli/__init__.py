"""Command-line tools for the safe transfer layer (`safe-transfer`)."""

from .main import app, main

__all__ = ["app", "main"]
