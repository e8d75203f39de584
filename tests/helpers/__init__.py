"""Test helper modules.

This package provides:
- fake_testrail: an in-memory TestRail speaking the API v2 path grammar
"""

from .fake_testrail import FakeTestRail, RecordedCall, operations_in_order

__all__ = [
    'FakeTestRail',
    'RecordedCall',
    'operations_in_order',
]
