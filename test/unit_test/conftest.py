"""
Shared fixtures for unit tests.

Nothing here touches the network: market data, nodes and the sponsor
relay are replaced with in-memory fakes.
"""

import sys
from pathlib import Path
from typing import Dict, Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from agent_trade.config import PoolCacheConfig
from agent_trade.errors import PersistenceError
from agent_trade.types.pool import PoolPage, PoolRecord

# Well-known anvil/hardhat development account #0
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


def token_dict(symbol: str, address: Optional[str] = None) -> Dict:
    return {
        "chainId": 101,
        "address": address or f"{symbol}Mint1111111111111111111111111111111",
        "programId": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
        "logoURI": f"https://img.example.com/{symbol}.png",
        "symbol": symbol,
        "name": f"{symbol} token",
        "decimals": 9,
        "tags": ["hasFreeze"],
        "extensions": {},
    }


def stats_dict(volume: float = 1000.0) -> Dict:
    return {
        "volume": volume,
        "volumeQuote": volume * 2,
        "volumeFee": volume / 400,
        "apr": 12.5,
        "feeApr": 10.0,
        "priceMin": 0.9,
        "priceMax": 1.1,
        "rewardApr": [2.5],
    }


def pool_dict(pool_id: str, symbol_a: str = "SOL", symbol_b: str = "BONK", tvl: float = 50_000.0) -> Dict:
    return {
        "type": "Standard",
        "programId": "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8",
        "id": pool_id,
        "mintA": token_dict(symbol_a),
        "mintB": token_dict(symbol_b),
        "price": 0.000021,
        "feeRate": 0.0025,
        "tvl": tvl,
        "day": stats_dict(1000.0),
        "week": stats_dict(7000.0),
        "month": stats_dict(30000.0),
    }


def make_record(pool_id: str, symbol_a: str = "SOL", symbol_b: str = "BONK", tvl: float = 50_000.0) -> PoolRecord:
    return PoolRecord.from_dict(pool_dict(pool_id, symbol_a, symbol_b, tvl))


def api_payload(items, has_next_page: bool = True) -> Dict:
    return {
        "id": "req-1",
        "success": True,
        "data": {"count": 5000, "data": items, "hasNextPage": has_next_page},
    }


class MemoryStore:
    """DurableStore kept in a dict; can be told to fail"""

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.puts = 0

    def get(self, key: str) -> Optional[bytes]:
        if self.fail_reads:
            raise PersistenceError.read_failed(key, OSError("disk unavailable"))
        return self.data.get(key)

    def put(self, key: str, value: bytes) -> None:
        if self.fail_writes:
            raise PersistenceError.write_failed(key, OSError("disk full"))
        self.puts += 1
        self.data[key] = value


class FakeSource:
    """PoolDataSource serving canned pages; an Exception entry is raised"""

    def __init__(self, pages: Dict[int, object]):
        self.pages = pages
        self.calls = []

    async def fetch_pools(self, pool_type, page_num, sort_field, sort_type, page_size):
        self.calls.append(page_num)
        page = self.pages.get(page_num)
        if isinstance(page, Exception):
            raise page
        if page is None:
            return PoolPage(success=True, count=0, has_next_page=False, records=[])
        return page


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def cache_config():
    """Pool cache settings without pauses, two pages starting at 1"""
    return PoolCacheConfig(
        db_path=":memory:",
        store_key="filtered_pools",
        pool_type="all",
        sort_field="volume24h",
        sort_type="desc",
        page_size=16,
        first_page=1,
        pages_per_cycle=2,
        page_pause_seconds=0,
        refresh_interval_seconds=0,
        inclusion_symbols=["SOL", "WSOL", "USDC", "USDT"],
        exclusion_symbols=["SOL", "WSOL", "WBTC", "BTC", "ETH", "WETH", "USDC", "USDT", "RAY"],
    )


@pytest.fixture(autouse=True)
def _reset_signer_strategy():
    from agent_trade.infra.evm_signer import reset_signer_strategy
    reset_signer_strategy()
    yield
    reset_signer_strategy()
