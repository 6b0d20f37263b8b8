"""
Copy engine for moving table data between deployment stages.
"""

from .copier import TableCopyPipeline, copy_after_deploy
from .enumerator import enumerate_tables, TABLE_RESOURCE_TYPE
from .pool import BoundedStore

__all__ = [
    "TableCopyPipeline",
    "copy_after_deploy",
    "enumerate_tables",
    "TABLE_RESOURCE_TYPE",
    "BoundedStore",
]
