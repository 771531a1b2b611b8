"""
Raydium market data API client

Fetches pages of pool summaries from the Raydium v3 pool list endpoint.
Honors HTTP_PROXY. HTTP failures surface as TransportError, malformed
bodies as ParseError.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...config import config as global_config
from ...errors import TransportError
from ...types.pool import PoolPage
from .pool_parser import parse_pool_page

logger = logging.getLogger(__name__)

POOL_LIST_PATH = "/pools/info/list"


class RaydiumAPI:
    """
    Raydium v3 API client

    Usage:
        api = RaydiumAPI()
        page = await api.fetch_pools("all", 100, "volume24h", "desc", 16)
        for record in page.records:
            print(record.symbol, record.tvl)
        await api.close()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        proxy: Optional[str] = None,
    ):
        raydium = global_config.raydium
        self._base_url = (base_url or raydium.base_url).rstrip("/")
        self._timeout = timeout or raydium.timeout
        self._proxy = proxy if proxy is not None else raydium.proxy
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return f"{self._base_url}{POOL_LIST_PATH}"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                proxy=self._proxy or None,
            )
        return self._client

    async def fetch_pools(
        self,
        pool_type: str,
        page_num: int,
        sort_field: str,
        sort_type: str,
        page_size: int,
    ) -> PoolPage:
        """
        Fetch one page of pools

        Args:
            pool_type: "all", "standard", "concentrated", ...
            page_num: 1-based page number
            sort_field: e.g. "volume24h", "tvl", "apr24h"
            sort_type: "asc" or "desc"
            page_size: Records per page

        Raises:
            TransportError: Network failure, HTTP error or success=false
            ParseError: Body or any record is malformed
        """
        params = {
            "poolType": pool_type,
            "poolSortField": sort_field,
            "sortType": sort_type,
            "pageSize": page_size,
            "page": page_num,
        }
        logger.debug(f"Querying Raydium pools: {params}")

        client = self._get_client()
        try:
            response = await client.get(self.url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise TransportError.timeout(self.url, self._timeout, e)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise TransportError.rate_limited(self.url)
            raise TransportError(
                f"HTTP error {e.response.status_code}",
                original_error=e,
                endpoint=self.url,
            )
        except httpx.RequestError as e:
            raise TransportError.connection_failed(self.url, e)
        except ValueError as e:
            raise TransportError.invalid_response(self.url, f"non-JSON body: {e}")

        if not isinstance(payload, dict) or not payload.get("success", False):
            message = payload.get("msg", "success=false") if isinstance(payload, dict) else "unexpected body"
            raise TransportError.invalid_response(self.url, str(message))

        page = parse_pool_page(payload)
        logger.debug(f"Raydium page {page_num}: {len(page)} records (count={page.count})")
        return page

    async def close(self):
        """Close the HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RaydiumAPI":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
