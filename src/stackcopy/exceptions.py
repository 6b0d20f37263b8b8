"""
Custom exceptions for the stack table copier.
"""

from typing import Any, Optional


class StackCopyException(Exception):
    """Base exception for all application-specific errors."""
    pass

class ConfigurationError(StackCopyException):
    """Error related to copy configuration, the manifest or a table schema."""
    pass

class ExecutionError(StackCopyException):
    """Error during a copy run stage."""
    pass

class StorageError(StackCopyException):
    """Exception raised for storage engine errors."""

    def __init__(self, message: str, table_name: Optional[str] = None, payload: Any = None):
        super().__init__(message)
        self.table_name = table_name
        self.payload = payload
