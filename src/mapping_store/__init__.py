"""Mapping between local test files and their TestRail suites and cases.

This package provides the Mapping data model, the indexed MappingStore used
during reconciliation, and MappingFile for loading and saving the persisted
snapshot.
"""

from .errors import MappingError
from .mapping_file import MappingFile
from .models import FileEntry, Mapping, ScenarioLink
from .store import MappingStore

__all__ = [
    'MappingError',
    'MappingFile',
    'FileEntry',
    'Mapping',
    'ScenarioLink',
    'MappingStore',
]
