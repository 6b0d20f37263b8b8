"""
Run-scoped state shared between the stages of a copy run.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from pydantic import BaseModel, Field

from ..exceptions import ConfigurationError
from .config import CopyConfig
from .result import TableCopyStats

HASH = "HASH"
RANGE = "RANGE"

Record = Dict[str, Any]


class KeySchema(BaseModel):
    """Primary key attributes of one physical table."""
    partition_key: str = Field(..., description="Hash key attribute name")
    sort_key: Optional[str] = Field(None, description="Range key attribute name")

    @classmethod
    def from_key_schema(cls, table_name: str, entries: List[Dict[str, str]]) -> "KeySchema":
        """
        Build from a storage engine key schema listing.

        Args:
            table_name: Physical table the schema belongs to
            entries: ``[{"AttributeName": ..., "KeyType": "HASH" | "RANGE"}, ...]``

        Raises:
            ConfigurationError: If no hash key is declared
        """
        partition = next((e["AttributeName"] for e in entries if e.get("KeyType") == HASH), None)
        if partition is None:
            raise ConfigurationError(f"Table {table_name} has no {HASH} key in its key schema")
        sort = next((e["AttributeName"] for e in entries if e.get("KeyType") == RANGE), None)
        return cls(partition_key=partition, sort_key=sort)

    def key_for(self, record: Record) -> Record:
        """Extract the primary key of a record."""
        key = {self.partition_key: record[self.partition_key]}
        if self.sort_key:
            key[self.sort_key] = record[self.sort_key]
        return key


class TableDescriptor(BaseModel):
    """A logical table and its physical names in the source and target stage."""
    logical_name: str
    source_name: str
    target_name: str

    @classmethod
    def for_config(cls, logical_name: str, config: CopyConfig) -> "TableDescriptor":
        """
        Raises:
            ConfigurationError: If both stages resolve to the same physical table
        """
        source_name = physical_name(logical_name, config.source_stage, config.stage_placeholder)
        target_name = physical_name(logical_name, config.target_stage, config.stage_placeholder)
        if source_name == target_name:
            raise ConfigurationError(
                f"Table {logical_name} has the same name in {config.source_stage} and {config.target_stage}: "
                f"it does not contain the stage placeholder {config.stage_placeholder!r}"
            )
        return cls(logical_name=logical_name, source_name=source_name, target_name=target_name)


def physical_name(logical_name: str, stage: str, placeholder: str) -> str:
    """Substitute the stage into a logical table name."""
    return logical_name.replace(placeholder, stage)


@dataclass
class CopyContext:
    """
    State built up by the stages of one run.

    Schemas and record sets are keyed by physical table name. Each key is
    written once by the stage that owns it and only read afterwards.
    """
    config: CopyConfig
    store: Any
    tables: List[TableDescriptor] = field(default_factory=list)
    keys: Dict[str, KeySchema] = field(default_factory=dict)
    records: Dict[str, List[Record]] = field(default_factory=dict)
    stats: Dict[str, TableCopyStats] = field(default_factory=dict)

    @classmethod
    def create(cls, config: CopyConfig, logical_names: List[str], store: Any) -> "CopyContext":
        """
        Args:
            config: Run configuration
            logical_names: Tables to copy
            store: Async store the stages call (see ``engine.pool.BoundedStore``)
        """
        tables = [TableDescriptor.for_config(name, config) for name in logical_names]
        stats = {
            t.logical_name: TableCopyStats(source_name=t.source_name, target_name=t.target_name)
            for t in tables
        }
        return cls(config=config, store=store, tables=tables, stats=stats)

    def physical_names(self, stage: str) -> List[str]:
        """Physical names of every table under a stage."""
        return [physical_name(t.logical_name, stage, self.config.stage_placeholder) for t in self.tables]

    def get_keys(self, table_name: str) -> KeySchema:
        if table_name not in self.keys:
            raise ConfigurationError(f"Key schema for {table_name} has not been resolved")
        return self.keys[table_name]

    def get_records(self, table_name: str) -> List[Record]:
        if table_name not in self.records:
            raise ConfigurationError(f"Records for {table_name} have not been downloaded")
        return self.records[table_name]
