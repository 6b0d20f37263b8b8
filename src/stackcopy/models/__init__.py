"""
Models for the stack table copier.
"""

from .config import CopyConfig, DeployCopyConfig
from .context import CopyContext, KeySchema, TableDescriptor, physical_name
from .result import CopyResult, CopyState, TableCopyStats

__all__ = [
    # Configuration
    "CopyConfig",
    "DeployCopyConfig",

    # Run state
    "CopyContext",
    "KeySchema",
    "TableDescriptor",
    "physical_name",

    # Results
    "CopyResult",
    "CopyState",
    "TableCopyStats",
]
