"""
Bounded access to a table store from the event loop.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Dict, List, Any

from ..connectors.base import BaseTableStore

logger = logging.getLogger(__name__)


class BoundedStore:
    """
    Runs blocking store calls on a worker pool.

    At most ``max_concurrency`` calls are in flight at once; callers beyond
    that wait on a semaphore, so any number of calls can be launched up front.
    """

    def __init__(self, store: BaseTableStore, max_concurrency: int):
        self.store = store
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._executor = ThreadPoolExecutor(max_workers=max_concurrency, thread_name_prefix="stackcopy")

    def __enter__(self) -> "BoundedStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    async def _run(self, fn, *args, **kwargs):
        async with self._semaphore:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, partial(fn, *args, **kwargs))

    async def describe_key_schema(self, table_name: str) -> List[Dict[str, str]]:
        return await self._run(self.store.describe_key_schema, table_name)

    async def scan(self, table_name: str, all_pages: bool = True) -> List[Dict[str, Any]]:
        return await self._run(self.store.scan, table_name, all_pages=all_pages)

    async def delete_item(self, table_name: str, key: Dict[str, Any]) -> None:
        await self._run(self.store.delete_item, table_name, key)

    async def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        await self._run(self.store.put_item, table_name, item)
