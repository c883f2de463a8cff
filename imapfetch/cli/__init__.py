"""Command line interface for imapfetch."""

from .cli import main

__all__ = ["main"]
