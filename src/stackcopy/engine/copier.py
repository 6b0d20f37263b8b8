"""
Copy pipeline that moves table data from one stage to another.

A run goes through four stages in order: resolve key schemas, download
records, optionally clear the target tables, and upload. Within a stage
every table (and every record of a table) is processed concurrently.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, Any, Optional

from ..connectors.base import BaseTableStore
from ..exceptions import ExecutionError, StorageError
from ..models.config import CopyConfig
from ..models.context import CopyContext, KeySchema, TableDescriptor, Record
from ..models.result import CopyResult, CopyState
from .enumerator import enumerate_tables
from .pool import BoundedStore

logger = logging.getLogger(__name__)


def _error_payload(error: BaseException) -> Any:
    if isinstance(error, StorageError) and error.payload is not None:
        return error.payload
    return str(error)


async def _gather_all(aws) -> List[Any]:
    """
    Await every awaitable, then raise the first failure if there was one.

    Siblings of a failed call are left to finish rather than cancelled.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class TableCopyPipeline:
    """
    Copies every table declared in a resource manifest between two stages.
    """

    def __init__(self, store: BaseTableStore, resources: Dict[str, Any]):
        """
        Args:
            store: Storage engine holding the tables of both stages
            resources: Declared resources of the deployment (``resources.Resources``)
        """
        self.store = store
        self.resources = resources

    def run(self, config: CopyConfig, triggered_by: str = "manual") -> CopyResult:
        """
        Execute a copy run.

        Args:
            config: Copy configuration
            triggered_by: What started this run (manual, deploy)

        Returns:
            CopyResult; failures are recorded on it rather than raised
        """
        return asyncio.run(self.run_async(config, triggered_by=triggered_by))

    async def run_async(self, config: CopyConfig, triggered_by: str = "manual") -> CopyResult:
        """Execute a copy run on the current event loop."""
        result = CopyResult(
            id=str(uuid.uuid4()),
            source_stage=config.source_stage,
            target_stage=config.target_stage,
            overwrite_all_data=config.overwrite_all_data,
            triggered_by=triggered_by
        )

        logger.info(f"Starting copy run {result.id}: {config.source_stage} -> {config.target_stage} "
                    f"(overwrite_all_data={config.overwrite_all_data})")

        with BoundedStore(self.store, config.max_concurrency) as store:
            try:
                context = CopyContext.create(config, enumerate_tables(self.resources), store)
                result.tables = context.stats

                await self.resolve_keys(context, config.source_stage)
                await self.resolve_keys(context, config.target_stage)
                result.mark_state(CopyState.KEYS_VALIDATED)

                await self.download_all(context, config.source_stage)
                await self.download_all(context, config.target_stage)
                result.mark_state(CopyState.DOWNLOADED)

                await self.clear_tables(context)
                result.mark_state(CopyState.CLEARED)

                await self.upload_all(context)
                result.mark_state(CopyState.UPLOADED)

                result.mark_completed()
                logger.info(f"Copy run {result.id} completed for {len(context.tables)} tables")

            except Exception as e:
                logger.error(f"Copy run {result.id} failed after {result.state.value}: {e}")
                result.mark_failed(str(e))

        return result

    # Key Resolver

    async def resolve_keys(self, context: CopyContext, stage: str) -> Dict[str, KeySchema]:
        """Resolve the key schema of every table under ``stage``."""
        schemas = await _gather_all(
            self._resolve_table_keys(context, name) for name in context.physical_names(stage)
        )
        return dict(zip(context.physical_names(stage), schemas))

    async def _resolve_table_keys(self, context: CopyContext, table_name: str) -> KeySchema:
        try:
            entries = await context.store.describe_key_schema(table_name)
        except Exception as e:
            logger.error(f"Error on describing {table_name} : {_error_payload(e)}")
            raise

        keys = KeySchema.from_key_schema(table_name, entries)
        context.keys[table_name] = keys
        logger.debug(f"Resolved keys for {table_name}: {keys.model_dump(exclude_none=True)}")
        return keys

    # Downloader

    async def download_all(self, context: CopyContext, stage: str) -> Dict[str, int]:
        """Scan every table under ``stage`` into the context."""
        counts = await _gather_all(
            self._download_table(context, name) for name in context.physical_names(stage)
        )
        is_target = stage == context.config.target_stage
        for table, count in zip(context.tables, counts):
            if is_target:
                context.stats[table.logical_name].target_existing = count
            else:
                context.stats[table.logical_name].downloaded = count
        return dict(zip(context.physical_names(stage), counts))

    async def _download_table(self, context: CopyContext, table_name: str) -> int:
        try:
            items = await context.store.scan(table_name, all_pages=context.config.scan_all_pages)
        except Exception as e:
            logger.error(f"Error on downloading data from {table_name} : {_error_payload(e)}")
            raise

        context.records[table_name] = items
        logger.info(f"Downloaded {len(items)} items from {table_name}")
        return len(items)

    # Clearer

    async def clear_tables(self, context: CopyContext) -> None:
        """
        Delete what was downloaded from each target table.

        Only runs with ``overwrite_all_data``. Delete failures are logged
        and counted, never raised, so the upload always gets its turn.
        """
        if not context.config.overwrite_all_data:
            logger.info("overwrite_all_data is off, keeping existing target data")
            return

        await asyncio.gather(*(self._clear_table(context, table) for table in context.tables))

    async def _clear_table(self, context: CopyContext, table: TableDescriptor) -> None:
        table_name = table.target_name
        keys = context.get_keys(table_name)
        records = context.get_records(table_name)

        results = await asyncio.gather(
            *(self._delete_record(context, table_name, keys, record) for record in records),
            return_exceptions=True
        )
        errors = [r for r in results if isinstance(r, BaseException)]

        stats = context.stats[table.logical_name]
        stats.deleted = len(records) - len(errors)
        stats.delete_failed = len(errors)

        if errors:
            logger.error(f"Data delete failed: {len(errors)} of {len(records)} deletes from {table_name}: "
                         f"{_error_payload(errors[0])}")
        logger.info(f"Deleted {stats.deleted} items from {table_name}")

    async def _delete_record(self, context: CopyContext, table_name: str, keys: KeySchema, record: Record) -> None:
        try:
            key = keys.key_for(record)
        except KeyError as e:
            raise StorageError(f"Record in {table_name} is missing key attribute {e}",
                               table_name=table_name) from e
        await context.store.delete_item(table_name, key)

    # Uploader

    async def upload_all(self, context: CopyContext) -> None:
        """Write every source record into its target table."""
        await _gather_all(self._upload_table(context, table) for table in context.tables)

    async def _upload_table(self, context: CopyContext, table: TableDescriptor) -> int:
        records = context.get_records(table.source_name)
        table_name = table.target_name

        results = await asyncio.gather(
            *(context.store.put_item(table_name, record) for record in records),
            return_exceptions=True
        )
        errors = [r for r in results if isinstance(r, BaseException)]

        stats = context.stats[table.logical_name]
        stats.uploaded = len(records) - len(errors)

        if errors:
            logger.error(f"Data upload failed: {len(errors)} of {len(records)} items to {table_name}: "
                         f"{_error_payload(errors[0])}")
            raise ExecutionError(f"Upload to {table_name} failed: {errors[0]}") from errors[0]

        logger.info(f"Uploaded {len(records)} items to {table_name}")
        return len(records)


def copy_after_deploy(pipeline_factory, deploy_config, deployed_stage: str,
                      **overrides) -> Optional[CopyResult]:
    """
    Post-deploy entry point.

    Runs the configured copy only when its target stage is the stage that
    was just deployed; otherwise nothing is called and None is returned.

    Args:
        pipeline_factory: Callable returning a TableCopyPipeline; only called when the copy runs
        deploy_config: DeployCopyConfig read from the deployment configuration
        deployed_stage: Stage the deploy just finished for
        **overrides: Extra CopyConfig fields (region, max_concurrency, ...)
    """
    if not deploy_config.should_run(deployed_stage):
        logger.debug(f"No post-deploy copy configured for stage {deployed_stage}")
        return None

    config = deploy_config.to_copy_config(**overrides)
    return pipeline_factory().run(config, triggered_by="deploy")
