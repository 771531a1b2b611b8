"""
Pool record type definitions

PoolRecord mirrors one entry of the Raydium pool list API. `to_dict` produces
the same camelCase shape the API returns, which is also the persisted format.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional


def _number(data: Dict[str, Any], key: str) -> float:
    value = data[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"'{key}' must be a number, got {type(value).__name__}")
    return float(value)


def _string(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _integer(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"'{key}' must be an integer, got {type(value).__name__}")
    return value


@dataclass
class TokenInfo:
    """
    Token metadata as reported by the market data API

    Attributes:
        chain_id: Numeric chain id reported by the API
        address: Mint address (base58)
        program_id: Token program id
        logo_uri: Optional logo URL
        symbol: Ticker symbol (compared case-sensitively by the pool filter)
        name: Display name
        decimals: Token decimals
        tags: Unordered tag set
        extensions: Free-form extension data
    """
    chain_id: int
    address: str
    program_id: str
    symbol: str
    name: str
    decimals: int
    logo_uri: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenInfo":
        tags = data.get("tags", [])
        if not isinstance(tags, list):
            raise TypeError("'tags' must be a list")
        extensions = data.get("extensions") or {}
        if not isinstance(extensions, dict):
            raise TypeError("'extensions' must be an object")
        logo_uri = data.get("logoURI")
        if logo_uri is not None and not isinstance(logo_uri, str):
            raise TypeError("'logoURI' must be a string")
        return cls(
            chain_id=_integer(data, "chainId"),
            address=_string(data, "address"),
            program_id=_string(data, "programId"),
            symbol=_string(data, "symbol"),
            name=_string(data, "name"),
            decimals=_integer(data, "decimals"),
            logo_uri=logo_uri,
            tags=frozenset(str(tag) for tag in tags),
            extensions=dict(extensions),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "address": self.address,
            "programId": self.program_id,
            "logoURI": self.logo_uri,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "tags": sorted(self.tags),
            "extensions": self.extensions,
        }


@dataclass
class PoolStats:
    """Volume, fee and APR figures for one time window (day/week/month)"""
    volume: float
    volume_quote: float
    volume_fee: float
    apr: float
    fee_apr: float
    price_min: float
    price_max: float
    reward_apr: List[float] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolStats":
        reward_apr = data.get("rewardApr", [])
        if not isinstance(reward_apr, list):
            raise TypeError("'rewardApr' must be a list")
        return cls(
            volume=_number(data, "volume"),
            volume_quote=_number(data, "volumeQuote"),
            volume_fee=_number(data, "volumeFee"),
            apr=_number(data, "apr"),
            fee_apr=_number(data, "feeApr"),
            price_min=_number(data, "priceMin"),
            price_max=_number(data, "priceMax"),
            reward_apr=[float(v) for v in reward_apr],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volume": self.volume,
            "volumeQuote": self.volume_quote,
            "volumeFee": self.volume_fee,
            "apr": self.apr,
            "feeApr": self.fee_apr,
            "priceMin": self.price_min,
            "priceMax": self.price_max,
            "rewardApr": list(self.reward_apr),
        }


@dataclass
class PoolRecord:
    """
    Liquidity pool summary from the Raydium pool list

    `id` is the dedupe key. Once a record is cached its stats are never
    refreshed; a later observation of the same id is dropped.
    """
    id: str
    pool_type: str
    program_id: str
    token_a: TokenInfo
    token_b: TokenInfo
    price: float
    fee_rate: float
    tvl: float
    day: PoolStats
    week: PoolStats
    month: PoolStats

    @property
    def symbol(self) -> str:
        return f"{self.token_a.symbol}/{self.token_b.symbol}"

    def __repr__(self) -> str:
        return f"PoolRecord({self.symbol}, {self.pool_type}, {self.id[:8]}...)"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolRecord":
        """
        Build a record from the API's camelCase object

        Raises:
            KeyError: Required field missing
            TypeError: Field has the wrong type
            ValueError: Field value cannot be converted
        """
        if not isinstance(data, dict):
            raise TypeError("pool record must be an object")
        return cls(
            id=_string(data, "id"),
            pool_type=_string(data, "type"),
            program_id=_string(data, "programId"),
            token_a=TokenInfo.from_dict(data["mintA"]),
            token_b=TokenInfo.from_dict(data["mintB"]),
            price=_number(data, "price"),
            fee_rate=_number(data, "feeRate"),
            tvl=_number(data, "tvl"),
            day=PoolStats.from_dict(data["day"]),
            week=PoolStats.from_dict(data["week"]),
            month=PoolStats.from_dict(data["month"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.pool_type,
            "programId": self.program_id,
            "id": self.id,
            "mintA": self.token_a.to_dict(),
            "mintB": self.token_b.to_dict(),
            "price": self.price,
            "feeRate": self.fee_rate,
            "tvl": self.tvl,
            "day": self.day.to_dict(),
            "week": self.week.to_dict(),
            "month": self.month.to_dict(),
        }


@dataclass
class PoolPage:
    """One page of the market data API response"""
    success: bool
    count: int
    has_next_page: bool
    records: List[PoolRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)
