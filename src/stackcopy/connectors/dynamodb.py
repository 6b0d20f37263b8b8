"""DynamoDB table store backed by the boto3 low-level client."""

import os
import logging
from typing import List, Optional, Dict, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseTableStore
from ..exceptions import StorageError

logger = logging.getLogger(__name__)

API_VERSION = "2012-08-10"


class DynamoDBTableStore(BaseTableStore):
    """Store for DynamoDB tables.

    Records are kept in the low-level wire format (``{"S": "abc"}`` etc.)
    so that they are written back exactly as they were read.
    """

    def __init__(self, region: Optional[str] = None, endpoint_url: Optional[str] = None,
                 max_pool_connections: int = 25, client=None, **kwargs):
        """Initialize the DynamoDB store.

        Args:
            region: AWS region of the tables
            endpoint_url: Optional endpoint, e.g. for DynamoDB Local
            max_pool_connections: HTTP connection pool size of the client
            client: Optional pre-built boto3 client
        """
        super().__init__(region=region, **kwargs)
        self.endpoint_url = endpoint_url
        if client is None:
            client = boto3.client(
                'dynamodb',
                region_name=region,
                endpoint_url=endpoint_url,
                api_version=API_VERSION,
                config=Config(max_pool_connections=max_pool_connections)
            )
        self.client = client

    def _call(self, operation: str, table_name: str, **params) -> Dict[str, Any]:
        """Call a client operation, converting failures to StorageError.

        Raises:
            StorageError: If the call fails
        """
        try:
            logger.debug(f"Calling {operation} on {table_name}")
            return getattr(self.client, operation)(TableName=table_name, **params)
        except ClientError as e:
            payload = e.response.get('Error', {})
            raise StorageError(f"{operation} failed for {table_name}: {payload}",
                               table_name=table_name, payload=payload) from e
        except BotoCoreError as e:
            raise StorageError(f"{operation} failed for {table_name}: {e}",
                               table_name=table_name, payload=str(e)) from e

    def test_connection(self) -> bool:
        try:
            self.client.list_tables(Limit=1)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"DynamoDB connection test failed: {e}")
            return False

    def describe_key_schema(self, table_name: str) -> List[Dict[str, str]]:
        data = self._call('describe_table', table_name)
        return data['Table']['KeySchema']

    def scan(self, table_name: str, all_pages: bool = True) -> List[Dict[str, Any]]:
        items = []
        scan_kwargs = {}
        while True:
            response = self._call('scan', table_name, **scan_kwargs)
            items.extend(response.get('Items', []))
            if not all_pages or 'LastEvaluatedKey' not in response:
                break
            scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']
            logger.debug(f"Scanned {len(items)} items from {table_name} so far")
        return items

    def delete_item(self, table_name: str, key: Dict[str, Any]) -> None:
        self._call('delete_item', table_name, Key=key)

    def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        self._call('put_item', table_name, Item=item)


def create_store_from_env(region: Optional[str] = None, max_pool_connections: int = 25) -> DynamoDBTableStore:
    """Create a DynamoDB store using environment variables.

    Args:
        region: Region to use; falls back to AWS_REGION / AWS_DEFAULT_REGION
        max_pool_connections: HTTP connection pool size

    Returns:
        Configured DynamoDBTableStore instance
    """
    region = region or os.getenv('AWS_REGION') or os.getenv('AWS_DEFAULT_REGION')
    endpoint_url = os.getenv('DYNAMODB_ENDPOINT_URL') or None

    return DynamoDBTableStore(region=region, endpoint_url=endpoint_url,
                              max_pool_connections=max_pool_connections)
