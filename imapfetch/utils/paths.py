"""Centralized path definitions for imapfetch."""

from pathlib import Path

# Base application directory
IMAPFETCH_DIR = Path.home() / ".imapfetch"

# Specific files
CONFIG_PATH = IMAPFETCH_DIR / "config.json"
