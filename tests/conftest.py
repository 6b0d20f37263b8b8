"""Shared fixtures: an in-memory table store that records every call."""

from __future__ import annotations

import json
import threading
from typing import Any, Dict, List, Optional

import pytest

from stackcopy.connectors.base import BaseTableStore
from stackcopy.exceptions import StorageError


def item(id: str, **attrs: Any) -> Dict[str, Any]:
    """Build a record in DynamoDB wire format with string attributes."""
    record = {"id": {"S": id}}
    for name, value in attrs.items():
        record[name] = {"N": str(value)} if isinstance(value, int) else {"S": value}
    return record


class FakeTableStore(BaseTableStore):
    """In-memory stand-in for DynamoDB.

    ``fail_puts`` / ``fail_deletes`` map a table name to the ``id`` values
    whose writes or deletes raise StorageError. ``fail_describe`` and
    ``fail_scan`` hold table names whose lookups raise.
    """

    def __init__(self) -> None:
        super().__init__(region="local")
        self._lock = threading.Lock()
        self.schemas: Dict[str, List[Dict[str, str]]] = {}
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_puts: Dict[str, set] = {}
        self.fail_deletes: Dict[str, set] = {}
        self.fail_describe: set = set()
        self.fail_scan: set = set()

    # -- setup helpers -------------------------------------------------

    def create_table(self, name: str, partition_key: str = "id", sort_key: Optional[str] = None,
                     items: Optional[List[Dict[str, Any]]] = None) -> None:
        schema = [{"AttributeName": partition_key, "KeyType": "HASH"}]
        if sort_key:
            schema.append({"AttributeName": sort_key, "KeyType": "RANGE"})
        self.schemas[name] = schema
        self.tables[name] = {}
        for record in items or []:
            self.tables[name][self._key_of(name, record)] = dict(record)

    def _key_of(self, name: str, record: Dict[str, Any]) -> str:
        attrs = [entry["AttributeName"] for entry in self.schemas[name]]
        return json.dumps([record[a] for a in attrs], sort_keys=True)

    def calls_for(self, op: str, table_name: Optional[str] = None) -> List[tuple]:
        return [c for c in self.calls if c[0] == op and (table_name is None or c[1] == table_name)]

    def _record(self, *call: Any) -> None:
        with self._lock:
            self.calls.append(call)

    def _require(self, table_name: str) -> None:
        if table_name not in self.tables:
            raise StorageError(f"Requested resource not found: {table_name}", table_name=table_name,
                               payload={"Code": "ResourceNotFoundException"})

    # -- BaseTableStore ------------------------------------------------

    def test_connection(self) -> bool:
        return True

    def describe_key_schema(self, table_name: str) -> List[Dict[str, str]]:
        self._record("describe", table_name)
        if table_name in self.fail_describe:
            raise StorageError("describe failed", table_name=table_name, payload={"Code": "InternalServerError"})
        self._require(table_name)
        return list(self.schemas[table_name])

    def scan(self, table_name: str, all_pages: bool = True) -> List[Dict[str, Any]]:
        self._record("scan", table_name, all_pages)
        if table_name in self.fail_scan:
            raise StorageError("scan failed", table_name=table_name, payload={"Code": "InternalServerError"})
        self._require(table_name)
        with self._lock:
            return [dict(r) for r in self.tables[table_name].values()]

    def delete_item(self, table_name: str, key: Dict[str, Any]) -> None:
        self._record("delete", table_name, key)
        self._require(table_name)
        if key.get("id", {}).get("S") in self.fail_deletes.get(table_name, set()):
            raise StorageError("delete failed", table_name=table_name,
                               payload={"Code": "ProvisionedThroughputExceededException"})
        with self._lock:
            self.tables[table_name].pop(self._key_of(table_name, key), None)

    def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        self._record("put", table_name, item)
        self._require(table_name)
        if item.get("id", {}).get("S") in self.fail_puts.get(table_name, set()):
            raise StorageError("put failed", table_name=table_name,
                               payload={"Code": "ProvisionedThroughputExceededException"})
        with self._lock:
            self.tables[table_name][self._key_of(table_name, item)] = dict(item)


def table_resource(table_name: str) -> Dict[str, Any]:
    return {
        "Type": "AWS::DynamoDB::Table",
        "Properties": {
            "TableName": table_name,
            "BillingMode": "PAY_PER_REQUEST",
        },
    }


@pytest.fixture
def store() -> FakeTableStore:
    return FakeTableStore()


@pytest.fixture
def users_resources() -> Dict[str, Any]:
    return {
        "UsersTable": table_resource("Users-${stage}"),
        "UploadsBucket": {"Type": "AWS::S3::Bucket", "Properties": {"BucketName": "uploads-${stage}"}},
    }


@pytest.fixture
def users_store(store: FakeTableStore) -> FakeTableStore:
    """Users-dev holds three records, Users-prod one different record."""
    store.create_table("Users-dev", items=[item("u1", name="ann"), item("u2", name="bob"), item("u3", name="cy")])
    store.create_table("Users-prod", items=[item("p1", name="old")])
    return store
