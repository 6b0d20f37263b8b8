"""
Storage engines a copy run can read from and write to.
"""

from .base import BaseTableStore
from .dynamodb import DynamoDBTableStore, create_store_from_env

__all__ = [
    "BaseTableStore",
    "DynamoDBTableStore",
    "create_store_from_env",
]
