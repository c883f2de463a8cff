"""IMAP message retrieval client."""

__version__ = "0.1.0"
