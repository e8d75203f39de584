"""Exceptions raised while reading or writing the mapping file."""

from typing import Optional

from src.testrail_client.errors import SyncError


class MappingError(SyncError):
    """Raised when the mapping snapshot is malformed or cannot be written."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        if file_path and operation:
            full_message = f"Mapping file operation '{operation}' failed for {file_path}: {message}"
        elif file_path:
            full_message = f"Mapping error in {file_path}: {message}"
        else:
            full_message = f"Mapping error: {message}"
        super().__init__(full_message)
        self.file_path = file_path
        self.operation = operation
        self.original_message = message
