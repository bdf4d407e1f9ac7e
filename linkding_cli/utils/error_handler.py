"""
Exception hierarchy for the linkding CLI.

Every error raised by the package derives from LinkdingCLIError so the
command-line layer can report it uniformly. The hierarchy separates fatal
conditions (format, whole-file parse, dedup fetch) from the per-record
conditions that the import engine folds into its result.
"""

from typing import Optional


# ============================================================================
# Unified Exception Hierarchy for linkding-cli
# ============================================================================
# All custom exceptions for the project are defined here.
# Import these exceptions from linkding_cli.utils.error_handler
# ============================================================================


class LinkdingCLIError(Exception):
    """Base exception for all linkding CLI errors."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(LinkdingCLIError):
    """Configuration-related errors."""

    pass


# ============================================================================
# Format Errors
# ============================================================================


class FormatError(LinkdingCLIError):
    """Bookmark file format could not be determined or is not supported."""

    pass


class FormatRequiredError(FormatError):
    """File extension is unrecognized and no explicit format was given."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Cannot detect format from file extension of '{path}'. "
            f"Use --format to specify json, html or csv"
        )


class UnsupportedFormatError(FormatError):
    """An explicit format name is not one of the known formats."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        super().__init__(
            f"Unsupported format: {format_name}. Supported formats: json, html, csv"
        )


# ============================================================================
# Parse Errors
# ============================================================================


class FileParseError(LinkdingCLIError):
    """The input file as a whole could not be parsed."""

    pass


class ParseError(LinkdingCLIError):
    """
    A single input record could not be turned into a bookmark.

    Attributes:
        line: 1-based position of the record in the input
        message: Description of the problem
    """

    def __init__(self, line: int, message: str):
        self.line = line
        self.message = message
        super().__init__(f"Line {line}: {message}")


# ============================================================================
# Service Errors
# ============================================================================


class ServiceError(LinkdingCLIError):
    """Base class for failures while talking to the linkding service."""

    pass


class NetworkError(ServiceError):
    """Transport failure: connection refused, timeout, dedup fetch failure."""

    pass


class APIError(ServiceError):
    """
    The service answered with a non-success status.

    Attributes:
        status_code: HTTP status code, if known
        body: Response body text, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class APIClientError(APIError):
    """Request was rejected by the service (4xx)."""

    pass


class AuthenticationError(APIClientError):
    """Authentication/authorization errors."""

    pass


class NotFoundError(APIClientError):
    """Requested resource does not exist."""

    pass


# ============================================================================
# Import Errors
# ============================================================================


class MutationError(LinkdingCLIError):
    """
    A create or update call failed for one record.

    Attributes:
        line: Source line of the record
        action: "create" or "update"
        original_error: Underlying service error
    """

    def __init__(self, line: int, action: str, original_error: Exception):
        self.line = line
        self.action = action
        self.original_error = original_error
        super().__init__(f"Failed to {action}: {original_error}")


class PartialFailureError(LinkdingCLIError):
    """An otherwise completed run left one or more records unprocessed."""

    def __init__(self, error_count: int):
        self.error_count = error_count
        super().__init__(f"Completed with {error_count} error(s)")


# ============================================================================
# Export Errors
# ============================================================================


class ExportError(LinkdingCLIError):
    """
    Exception raised when export fails.

    Attributes:
        message: Error description
        format_name: Name of the export format
        path: Target path if available
        original_error: Underlying exception if any
    """

    def __init__(
        self,
        message: str,
        format_name: Optional[str] = None,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.format_name = format_name
        self.path = path
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.format_name:
            parts.append(f"[{self.format_name}]")
        parts.append(self.message)
        if self.path:
            parts.append(f"(path: {self.path})")
        if self.original_error:
            parts.append(
                f"Caused by: {type(self.original_error).__name__}: "
                f"{self.original_error}"
            )
        return " ".join(parts)


# ============================================================================
# Command Errors
# ============================================================================


class CommandError(LinkdingCLIError):
    """A command was invoked with unusable arguments or was cancelled."""

    pass
