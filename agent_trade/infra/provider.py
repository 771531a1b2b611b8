"""
Provider factory

Builds an AsyncWeb3 handle bound to a registered chain's RPC endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

from aiohttp import ClientTimeout
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.middleware import ExtraDataToPOAMiddleware

from ..config import config as global_config
from ..errors import ConfigurationError
from ..types.chains import get_chain_info

logger = logging.getLogger(__name__)

# BSC mainnet and testnet use Proof of Staked Authority
POA_CHAIN_IDS = (56, 97)


def _validate_endpoint(chain_name: str, url: str) -> None:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError.invalid(
            f"{chain_name}.provider_url", f"malformed RPC endpoint {url!r}"
        )


def make_provider(chain_name: str, timeout: Optional[float] = None) -> AsyncWeb3:
    """
    Create an AsyncWeb3 instance for a registered chain

    No network call is made; connectivity problems surface on first use.

    Args:
        chain_name: Registered chain name or alias (e.g. "ethereum", "bsc")
        timeout: Request timeout in seconds (defaults to RPC_TIMEOUT_SECONDS)

    Returns:
        AsyncWeb3 bound to the chain's RPC endpoint

    Raises:
        ConfigurationError: Unknown chain or malformed endpoint
    """
    chain = get_chain_info(chain_name)
    _validate_endpoint(chain.name, chain.provider_url)

    timeout = timeout if timeout is not None else global_config.tx.rpc_timeout_seconds
    provider = AsyncHTTPProvider(
        chain.provider_url,
        request_kwargs={"timeout": ClientTimeout(total=timeout)},
    )
    web3 = AsyncWeb3(provider)

    if chain.chain_id in POA_CHAIN_IDS:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    logger.debug(f"Provider for {chain.name} (chain_id={chain.chain_id}) -> {chain.provider_url}")
    return web3
