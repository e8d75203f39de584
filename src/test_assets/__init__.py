"""Local test tree: scenarios, activities and row-level steps.

The loader in this package reads YAML renditions of scripts and plans and
produces the LocalCase tree the reconciliation engine consumes.
"""

from .errors import ValidationError
from .loader import TestAssetLoader
from .models import LocalCase, LocalCustomStep, LocalStep, ScenarioIdentity

__all__ = [
    'TestAssetLoader',
    'ValidationError',
    'LocalCase',
    'LocalCustomStep',
    'LocalStep',
    'ScenarioIdentity',
]
