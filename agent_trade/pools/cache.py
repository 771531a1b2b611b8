"""
Pool discovery cache

PoolCache owns an insertion-ordered snapshot of filtered pool records,
deduplicated by pool id (first write wins), and mirrors it to a durable
store under one key. A background task refreshes it from the market data
API on a fixed interval; readers page through it with `query`.

The snapshot lock is never held across network or store I/O. Store calls
run in a worker thread. Writes are ordered by a generation counter so an
older snapshot never overwrites a newer one.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import json
import logging
from typing import List, Optional, Protocol, Set, Tuple

from ..config import PoolCacheConfig, config as global_config
from ..errors import ConfigurationError, ParseError, PersistenceError, TransportError
from ..infra.store import DurableStore
from ..protocols.raydium.pool_parser import parse_pool_records
from ..types.pool import PoolPage, PoolRecord
from .filter import filter_pools

logger = logging.getLogger(__name__)


class PoolDataSource(Protocol):
    """Anything that can fetch a page of pools (RaydiumAPI in production)"""

    async def fetch_pools(
        self,
        pool_type: str,
        page_num: int,
        sort_field: str,
        sort_type: str,
        page_size: int,
    ) -> PoolPage:
        ...


def serialize_records(records: List[PoolRecord]) -> bytes:
    """Encode records in the API's camelCase shape as a JSON array"""
    return json.dumps([record.to_dict() for record in records]).encode("utf-8")


def deserialize_records(blob: bytes) -> List[PoolRecord]:
    """
    Decode a persisted snapshot

    Raises:
        ParseError: Blob is not a JSON array of pool records
    """
    try:
        items = json.loads(blob)
    except ValueError as e:
        raise ParseError(f"Stored snapshot is not valid JSON: {e}", original_error=e)
    return parse_pool_records(items)


class PoolCache:
    """
    Deduplicated, persisted cache of filtered pool records

    Usage:
        cache = PoolCache(SqliteStore("agent_trade_db.sqlite3"), RaydiumAPI())
        await cache.start()                 # warm from store, spawn refresh loop
        records, total = await cache.query(1, 10)
        await cache.stop()
    """

    def __init__(
        self,
        store: DurableStore,
        data_source: Optional[PoolDataSource] = None,
        config: Optional[PoolCacheConfig] = None,
    ):
        self._store = store
        self._source = data_source
        self._config = config or global_config.pools

        self._records: List[PoolRecord] = []
        self._ids: Set[str] = set()
        self._lock = asyncio.Lock()

        # Persistence ordering
        self._write_lock = asyncio.Lock()
        self._generation = 0
        self._persisted_generation = 0
        self._loaded = False

        self._task: Optional[asyncio.Task] = None

    @property
    def config(self) -> PoolCacheConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._records)

    # ========== Snapshot ==========

    async def merge(self, records: List[PoolRecord]) -> int:
        """
        Append records whose id is not cached yet

        Returns:
            Number of records appended
        """
        added = 0
        async with self._lock:
            for record in records:
                if record.id in self._ids:
                    continue
                self._ids.add(record.id)
                self._records.append(record)
                added += 1
            if added:
                self._generation += 1
        return added

    async def snapshot(self) -> List[PoolRecord]:
        """Deep copy of all cached records in insertion order"""
        async with self._lock:
            return copy.deepcopy(self._records)

    async def _adopt_if_empty(self, records: List[PoolRecord]) -> int:
        async with self._lock:
            self._loaded = True
            if self._records:
                return 0
            for record in records:
                if record.id not in self._ids:
                    self._ids.add(record.id)
                    self._records.append(record)
            # Adopted state is already durable
            self._persisted_generation = self._generation
            return len(self._records)

    # ========== Persistence ==========

    async def _read_store(self) -> List[PoolRecord]:
        blob = await asyncio.to_thread(self._store.get, self._config.store_key)
        if blob is None:
            return []
        return deserialize_records(blob)

    async def load(self) -> int:
        """
        Populate an empty cache from the durable store

        Returns:
            Number of records loaded (0 if the cache was already populated)

        Raises:
            PersistenceError: Store unreadable
            ParseError: Stored snapshot malformed
        """
        records = await self._read_store()
        loaded = await self._adopt_if_empty(records)
        if loaded:
            logger.info(f"Loaded {loaded} pools from store key '{self._config.store_key}'")
        return loaded

    async def persist(self) -> bool:
        """
        Write the current snapshot if it changed since the last write

        Returns:
            True if a write happened

        Raises:
            PersistenceError: Store write failed (memory is kept as is)
        """
        async with self._lock:
            generation = self._generation
            if generation <= self._persisted_generation:
                return False
            blob = serialize_records(self._records)

        async with self._write_lock:
            if generation <= self._persisted_generation:
                return False
            await asyncio.to_thread(self._store.put, self._config.store_key, blob)
            self._persisted_generation = generation

        logger.debug(f"Persisted {len(blob)} bytes (generation {generation})")
        return True

    # ========== Refresh ==========

    async def refresh_once(self) -> int:
        """
        Run one refresh cycle

        Fetches `pages_per_cycle` pages starting at `first_page`, filters and
        merges each, and persists after every page that added records. Page
        fetch/parse failures and store failures are logged, not raised.

        A cache that has not read the store yet loads it first, so the stored
        snapshot is extended rather than overwritten. If that read fails the
        cycle still runs and the load is retried on the next one.

        Returns:
            Number of records appended this cycle
        """
        if self._source is None:
            raise ConfigurationError.missing("pool data source")

        if not self._loaded:
            try:
                await self.load()
            except (PersistenceError, ParseError) as e:
                logger.warning(f"Refreshing without the stored snapshot: {e}")

        cfg = self._config
        total_added = 0
        for i in range(cfg.pages_per_cycle):
            if i > 0 and cfg.page_pause_seconds > 0:
                await asyncio.sleep(cfg.page_pause_seconds)

            page_num = cfg.first_page + i
            try:
                page = await self._source.fetch_pools(
                    cfg.pool_type, page_num, cfg.sort_field, cfg.sort_type, cfg.page_size
                )
            except (TransportError, ParseError) as e:
                logger.warning(f"Skipping pool page {page_num}: {e}")
                continue

            accepted = filter_pools(page.records, cfg.inclusion_symbols, cfg.exclusion_symbols)
            added = await self.merge(accepted)
            logger.debug(
                f"Page {page_num}: fetched={len(page)} accepted={len(accepted)} added={added}"
            )
            total_added += added

            if added:
                try:
                    await self.persist()
                except PersistenceError as e:
                    logger.error(f"Failed to persist pool snapshot: {e}")

        logger.info(f"Refresh cycle done: {total_added} new pools, {len(self)} cached")
        return total_added

    async def run(self, max_iterations: Optional[int] = None):
        """
        Refresh loop

        Runs until cancelled, or for `max_iterations` cycles when given.
        """
        interval = self._config.refresh_interval_seconds
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            try:
                await self.refresh_once()
            except Exception as e:
                logger.error(f"Refresh iteration {iterations + 1} failed: {e}")

            iterations += 1

            if max_iterations is None or iterations < max_iterations:
                logger.debug(f"Sleeping {interval}s until next refresh...")
                await asyncio.sleep(interval)

    async def start(self) -> asyncio.Task:
        """Warm the cache from the store and spawn the refresh loop (once)"""
        if self._task is not None and not self._task.done():
            return self._task

        try:
            await self.load()
        except (PersistenceError, ParseError) as e:
            logger.error(f"Could not warm pool cache from store: {e}")

        self._task = asyncio.create_task(self.run(), name="pool-cache-refresh")
        return self._task

    async def stop(self):
        """Cancel the refresh loop and wait for it to finish"""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    # ========== Query ==========

    async def query(self, page_num: int, page_size: int) -> Tuple[List[PoolRecord], int]:
        """
        Page through the cached pools

        An empty cache is first filled from the durable store. A store
        failure is logged and the (empty) cache is served.

        Args:
            page_num: 1-based page number
            page_size: Records per page (0 returns no records)

        Returns:
            (deep-copied records of the page, total cached count)

        Raises:
            ConfigurationError: page_num < 1 or page_size < 0
        """
        if page_num < 1:
            raise ConfigurationError.invalid("page_num", "must be >= 1")
        if page_size < 0:
            raise ConfigurationError.invalid("page_size", "must be >= 0")

        async with self._lock:
            empty = not self._records

        if empty:
            try:
                records = await self._read_store()
            except (PersistenceError, ParseError) as e:
                logger.error(f"Cold-start load failed, serving empty cache: {e}")
                records = []
            if records:
                await self._adopt_if_empty(records)

        async with self._lock:
            total = len(self._records)
            if page_size == 0:
                return [], total
            start = (page_num - 1) * page_size
            if start >= total:
                return [], total
            end = min(start + page_size, total)
            return copy.deepcopy(self._records[start:end]), total
