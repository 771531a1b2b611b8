"""
Pool cache service entry point

    python -m agent_trade                # warm from store, refresh forever
    python -m agent_trade --once         # single refresh cycle
    python -m agent_trade --query 1 10   # print one page of cached pools
"""

import argparse
import asyncio
import json
import logging
import sys

from .config import config, setup_logging
from .errors import AgentTradeError
from .infra.store import SqliteStore
from .pools.cache import PoolCache
from .protocols.raydium import RaydiumAPI

logger = logging.getLogger("agent_trade")


async def _run(args) -> int:
    store = SqliteStore(args.db or config.pools.db_path)
    api = RaydiumAPI()
    cache = PoolCache(store, api)

    try:
        if args.query:
            page_num, page_size = args.query
            records, total = await cache.query(page_num, page_size)
            print(json.dumps({
                "total": total,
                "pools": [record.to_dict() for record in records],
            }, indent=2))
            return 0

        if args.once:
            await cache.load()
            added = await cache.refresh_once()
            logger.info(f"Single refresh added {added} pools ({len(cache)} cached)")
            return 0

        task = await cache.start()
        await task
        return 0
    finally:
        await cache.stop()
        await api.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Raydium pool discovery cache")
    parser.add_argument("--once", action="store_true", help="run a single refresh cycle and exit")
    parser.add_argument("--query", nargs=2, type=int, metavar=("PAGE", "SIZE"), help="print a page of cached pools")
    parser.add_argument("--db", type=str, default=None, help="sqlite database path (default POOL_DB_PATH)")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 130
    except AgentTradeError as e:
        logger.error(f"Fatal: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
