"""Centralized error handling module."""

from enum import Enum, IntEnum
from typing import Any, Dict

from imapfetch.utils.logging import get_logger

_logger = None


def _get_logger():
    """Get logger with lazy initialisation."""
    global _logger
    if _logger is None:
        _logger = get_logger(__name__)
    return _logger


## Exit Codes


class ExitCode(IntEnum):
    """Process exit codes surfaced by the CLI."""

    SUCCESS = 0
    FAILURE = 1
    CONNECTION = 2
    NOT_FOUND = 3
    MIME_STRUCTURE = 4
    INTERRUPTED = 130


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    NETWORK = "network"
    PROTOCOL = "protocol"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    STRUCTURE = "structure"
    ALLOCATION = "allocation"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    FILE_SYSTEM = "file_system"
    UNKNOWN = "unknown"


## Custom Exceptions


class ImapFetchError(Exception):
    """Base exception for all imapfetch errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"
    exit_code = ExitCode.FAILURE

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise ImapFetchError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
            "exit_code": int(self.exit_code),
        }


## Network Errors


class NetworkError(ImapFetchError):
    """Base exception for network-related errors."""

    category = ErrorCategory.NETWORK
    user_message = "A network error occurred"


class ConnectionFailedError(NetworkError):
    """Exception when the server cannot be reached over IPv6 or IPv4."""

    user_message = "Failed to connect to the IMAP server"
    exit_code = ExitCode.CONNECTION


class TransportError(NetworkError):
    """Exception for connection read/write failures."""

    user_message = "The connection to the IMAP server failed"


class NetworkTimeoutError(TransportError):
    """Exception for network timeout errors."""

    user_message = "The connection timed out"


## Protocol Errors


class ProtocolError(ImapFetchError):
    """Base exception for unexpected IMAP responses."""

    category = ErrorCategory.PROTOCOL
    user_message = "Unexpected response from the IMAP server"


class GreetingError(ProtocolError):
    """Exception when the server greeting is not an untagged OK."""

    user_message = "Connect failure"


class CommandFailedError(ProtocolError):
    """Exception when a command completes with NO or BAD."""

    user_message = "The IMAP command failed"


## Authentication Errors


class AuthenticationError(ImapFetchError):
    """Base exception for authentication-related errors."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "An authentication error occurred"


class LoginError(AuthenticationError):
    """Exception when the server rejects LOGIN."""

    user_message = "Login failure"
    exit_code = ExitCode.NOT_FOUND


class MissingCredentialsError(AuthenticationError):
    """Exception for missing login credentials."""

    user_message = "Username or Password not found"


## Not Found Errors


class NotFoundError(ImapFetchError):
    """Base exception for absent folders, messages and fields."""

    category = ErrorCategory.NOT_FOUND
    user_message = "Not found"
    exit_code = ExitCode.NOT_FOUND


class FolderNotFoundError(NotFoundError):
    """Exception when SELECT fails."""

    user_message = "Folder not found"


class FramingError(NotFoundError):
    """Base exception for an expected literal or response line being absent."""

    user_message = "Expected response not found"


class LiteralNotFoundError(FramingError):
    """Exception when a peeked chunk does not announce the expected literal."""

    user_message = "Literal not found"


class MessageNotFoundError(FramingError):
    """Exception when the requested message does not exist."""

    user_message = "Message not found"


class FieldNotFoundError(FramingError):
    """Exception when a header field response is absent or malformed."""

    user_message = "Header field not found"


class ListingFormatError(FramingError):
    """Exception for a malformed multi-message FETCH response."""

    user_message = "Header not found"


## MIME Structure Errors


class StructuralError(ImapFetchError):
    """Base exception for MIME structure violations."""

    category = ErrorCategory.STRUCTURE
    user_message = "Malformed MIME message"
    exit_code = ExitCode.MIME_STRUCTURE


class MimeVersionMissingError(StructuralError):
    """Exception when no MIME-Version: 1.0 header is present."""

    user_message = "MIME-Version not found"


class NotMultipartAlternativeError(StructuralError):
    """Exception when the message is not multipart/alternative."""

    user_message = "Content-Type: multipart/alternative not found"


class BoundaryMissingError(StructuralError):
    """Exception when the boundary parameter is absent or empty."""

    user_message = "Boundary not found"


class StartBoundaryMissingError(StructuralError):
    """Exception when the first boundary delimiter is absent."""

    user_message = "Starting boundary not found"


class PlainTextPartMissingError(StructuralError):
    """Exception when no text/plain UTF-8 part exists."""

    user_message = "Content-Type text/plain with charset UTF-8 not found"


class EncodingMissingError(StructuralError):
    """Exception when the selected part has no accepted transfer-encoding."""

    user_message = "Content-Transfer-Encoding not found"


class EndBoundaryMissingError(StructuralError):
    """Exception when the closing boundary delimiter is absent."""

    user_message = "Ending boundary not found"


## Allocation Errors


class AllocationError(ImapFetchError):
    """Base exception for buffers that cannot be sized."""

    category = ErrorCategory.ALLOCATION
    user_message = "Memory allocation failure"


class LiteralTooLargeError(AllocationError):
    """Exception when an announced literal exceeds the configured limit."""

    user_message = "Announced literal is too large"


## Validation Errors


class ValidationError(ImapFetchError):
    """Base exception for validation-related errors."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid input"


## Configuration Errors


class ConfigurationError(ImapFetchError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class MissingConfigError(ConfigurationError):
    """Exception for missing configuration settings."""

    user_message = "Missing configuration settings"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## File System Errors


class FileSystemError(ImapFetchError):
    """Exception for log or config files that cannot be written."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"


## Error Handler


class ErrorHandler:
    """Centralized error handling and logging."""

    @staticmethod
    def handle(
        error: Exception, context: str = "", log_traceback: bool = False
    ) -> Dict[str, Any]:
        """Handle errors with logging and user-friendly message."""
        if isinstance(error, ImapFetchError):
            _get_logger().error(f"{context}: {error.message}", extra=error.details)
            if log_traceback:
                _get_logger().exception(error)
            return error.to_dict()
        else:
            _get_logger().error(f"{context}: {str(error)}")
            if log_traceback:
                _get_logger().exception(error)
            return {
                "error_type": "UnknownError",
                "category": ErrorCategory.UNKNOWN.value,
                "message": str(error),
                "details": {"context": context},
                "exit_code": int(ExitCode.FAILURE),
            }


## Utility Functions


def exit_code_for(error: BaseException) -> ExitCode:
    """Map an exception to the process exit code."""
    if isinstance(error, ImapFetchError):
        return error.exit_code
    if isinstance(error, KeyboardInterrupt):
        return ExitCode.INTERRUPTED
    return ExitCode.FAILURE


def format_error_message(error: Exception) -> str:
    """Format an error message for display."""
    if isinstance(error, ImapFetchError):
        return error.message
    elif isinstance(error, MemoryError):
        return AllocationError.user_message
    else:
        return "An unexpected error occurred - check logs for details."
