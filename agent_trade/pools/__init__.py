"""
Pool discovery

- filter: inclusion/exclusion rule for candidate pools
- cache: deduplicated, persisted snapshot with a background refresh loop
"""

from .filter import accept, filter_pools
from .cache import PoolCache, PoolDataSource, serialize_records, deserialize_records

__all__ = [
    "accept",
    "filter_pools",
    "PoolCache",
    "PoolDataSource",
    "serialize_records",
    "deserialize_records",
]
