"""
Raydium market data

Pool list API client and response parser.
"""

from .api import RaydiumAPI, POOL_LIST_PATH
from .pool_parser import parse_pool_page, parse_pool_record, parse_pool_records

__all__ = [
    "RaydiumAPI",
    "POOL_LIST_PATH",
    "parse_pool_page",
    "parse_pool_record",
    "parse_pool_records",
]
