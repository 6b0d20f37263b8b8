"""
Base class for table storage engines.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
import logging

logger = logging.getLogger(__name__)


class BaseTableStore(ABC):
    """
    Abstract base class for the storage engine a copy run talks to.

    Implementations are synchronous; the copy pipeline runs them on worker
    threads. Every method may be called from several threads at once.
    """

    def __init__(self, region: Optional[str] = None, **kwargs):
        """
        Initialize the store.

        Args:
            region: Optional region of the storage engine
            **kwargs: Additional configuration parameters
        """
        self.region = region
        self.config = kwargs
        logger.info(f"Initialized {self.__class__.__name__} store")

    @abstractmethod
    def test_connection(self) -> bool:
        """Test if the store can successfully connect to the service."""
        pass

    @abstractmethod
    def describe_key_schema(self, table_name: str) -> List[Dict[str, str]]:
        """
        Return the key schema of a table.

        Args:
            table_name: Physical table name

        Returns:
            List of ``{"AttributeName": ..., "KeyType": "HASH" | "RANGE"}``
        """
        pass

    @abstractmethod
    def scan(self, table_name: str, all_pages: bool = True) -> List[Dict[str, Any]]:
        """
        Read every record of a table.

        Args:
            table_name: Physical table name
            all_pages: Follow pagination; if False only the first page is read

        Returns:
            List of records as attribute maps
        """
        pass

    @abstractmethod
    def delete_item(self, table_name: str, key: Dict[str, Any]) -> None:
        """Delete the record with the given primary key."""
        pass

    @abstractmethod
    def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        """Write a record, replacing any record with the same key."""
        pass
