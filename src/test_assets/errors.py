"""Exceptions raised while reading local test assets."""

from typing import Optional

from src.testrail_client.errors import SyncError


class ValidationError(SyncError):
    """Raised for a bad or missing local test file or an invalid selection.

    Covers unreadable files, malformed YAML, unknown scenarios or subplans and
    structurally invalid scripts (blank or duplicate activities).
    """

    def __init__(self, message: str, file_path: Optional[str] = None):
        if file_path:
            full_message = f"{message} ({file_path})"
        else:
            full_message = message
        super().__init__(full_message)
        self.file_path = file_path
        self.original_message = message
