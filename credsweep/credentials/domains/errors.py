"""Error types for credsweep."""
from typing import Optional


class SetupError(Exception):
    """Fatal error raised before a batch can start."""
    pass


class ConfigError(SetupError):
    """Configuration error exception."""
    pass


class InputError(SetupError):
    """Input file is missing, unreadable or malformed."""
    pass


class DirectorySessionError(SetupError):
    """Directory session could not be established."""
    pass


class DirectoryError(Exception):
    """A single directory call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
