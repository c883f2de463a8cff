from .connection import IMAPConnection
from .protocol import IMAPProtocol
from .session import IMAPSession
from .transport import IMAPTransport

__all__ = ["IMAPConnection", "IMAPProtocol", "IMAPSession", "IMAPTransport"]
