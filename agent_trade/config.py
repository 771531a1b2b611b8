"""
Configuration management for Agent Trade

Loads settings from environment variables and .env file.
Includes logging configuration with file output and correlation ID support.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # agent_trade package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _get_env_list(key: str, default: List[str]) -> List[str]:
    """Get environment variable as comma-separated list"""
    value = os.getenv(key)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


# Symbols are matched exactly (case-sensitive)
DEFAULT_EXCLUSION_SYMBOLS = ["SOL", "WSOL", "WBTC", "BTC", "ETH", "WETH", "USDC", "USDT", "RAY"]
DEFAULT_INCLUSION_SYMBOLS = ["SOL", "WSOL", "USDC", "USDT"]


@dataclass
class RaydiumConfig:
    """Raydium market data API configuration"""
    base_url: str = field(default_factory=lambda: _get_env("RAYDIUM_API_URL", "https://api-v3.raydium.io"))
    timeout: float = field(default_factory=lambda: _get_env_float("RAYDIUM_TIMEOUT", 30.0))
    # Optional HTTP proxy for the market data client
    proxy: Optional[str] = field(default_factory=lambda: _get_env("HTTP_PROXY", None) or None)


@dataclass
class PoolCacheConfig:
    """Pool discovery cache and refresh loop configuration"""
    db_path: str = field(default_factory=lambda: _get_env("POOL_DB_PATH", "agent_trade_db.sqlite3"))
    store_key: str = field(default_factory=lambda: _get_env("POOL_STORE_KEY", "filtered_pools"))

    # Market data query
    pool_type: str = field(default_factory=lambda: _get_env("POOL_TYPE", "all"))
    sort_field: str = field(default_factory=lambda: _get_env("POOL_SORT_FIELD", "volume24h"))
    sort_type: str = field(default_factory=lambda: _get_env("POOL_SORT_TYPE", "desc"))
    page_size: int = field(default_factory=lambda: _get_env_int("POOL_PAGE_SIZE", 16))
    first_page: int = field(default_factory=lambda: _get_env_int("POOL_FIRST_PAGE", 100))
    pages_per_cycle: int = field(default_factory=lambda: _get_env_int("POOL_PAGES_PER_CYCLE", 2))

    # Pacing
    page_pause_seconds: float = field(default_factory=lambda: _get_env_float("POOL_PAGE_PAUSE_SECONDS", 2.0))
    refresh_interval_seconds: float = field(
        default_factory=lambda: _get_env_float("POOL_REFRESH_INTERVAL_SECONDS", 600.0)
    )

    # Filter sets
    inclusion_symbols: List[str] = field(
        default_factory=lambda: _get_env_list("POOL_INCLUSION_SYMBOLS", DEFAULT_INCLUSION_SYMBOLS)
    )
    exclusion_symbols: List[str] = field(
        default_factory=lambda: _get_env_list("POOL_EXCLUSION_SYMBOLS", DEFAULT_EXCLUSION_SYMBOLS)
    )


@dataclass
class SignerConfig:
    """Signer selection and local key configuration"""
    # LOCAL or EIP7702 (delegated sponsor)
    account_type: str = field(default_factory=lambda: _get_env("ACCOUNT_TYPE", "LOCAL"))
    private_key: str = field(default_factory=lambda: _get_env("EVM_PRIVATE_KEY", ""))


@dataclass
class SponsorConfig:
    """Gas sponsor relay configuration (delegated signing strategy)"""
    relay_url: str = field(default_factory=lambda: _get_env("SPONSOR_RELAY_URL", ""))
    rpc_method: str = field(default_factory=lambda: _get_env("SPONSOR_RPC_METHOD", "relay_sendTransaction"))
    api_key: Optional[str] = field(default_factory=lambda: _get_env("SPONSOR_API_KEY", None))
    timeout: float = field(default_factory=lambda: _get_env_float("SPONSOR_TIMEOUT", 20.0))


@dataclass
class TxConfig:
    """Transaction submission configuration"""
    receipt_timeout: float = field(default_factory=lambda: _get_env_float("TX_RECEIPT_TIMEOUT", 120.0))
    # Multiplier for gas limit estimates (not gas price) to provide buffer
    gas_limit_multiplier: float = field(default_factory=lambda: _get_env_float("TX_GAS_LIMIT_MULTIPLIER", 1.2))
    # Priority fee (tip) in gwei for EIP-1559 chains
    priority_fee_gwei: float = field(default_factory=lambda: _get_env_float("TX_PRIORITY_FEE_GWEI", 0.1))
    rpc_timeout_seconds: float = field(default_factory=lambda: _get_env_float("RPC_TIMEOUT_SECONDS", 30.0))


@dataclass
class EVMConfig:
    """EVM-specific configuration"""
    # Transaction deadline in seconds (default: 20 minutes)
    tx_deadline_seconds: int = field(default_factory=lambda: _get_env_int("EVM_TX_DEADLINE_SECONDS", 1200))


def _get_default_log_path() -> str:
    """Get default log file path under agent_trade/log/ with UTC timestamp"""
    from datetime import datetime, timezone
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(__file__).parent / "log"
    return str(log_dir / f"agent_trade_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging configuration with file output and correlation ID support.

    Default log location: agent_trade/log/agent_trade_<timestamp>.log

    Environment variables:
        LOG_FILE: Path to log file (overrides default, empty disables file output)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", _get_default_log_path()))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class TradingConfig:
    """Default trading parameters and agent tool safety caps"""
    default_slippage_bps: int = field(default_factory=lambda: _get_env_int("DEFAULT_SLIPPAGE_BPS", 50))
    max_eth_amount: float = field(default_factory=lambda: _get_env_float("MAX_ETH_AMOUNT", 10.0))
    max_token_amount: float = field(default_factory=lambda: _get_env_float("MAX_TOKEN_AMOUNT", 100_000.0))
    max_swap_amount: float = field(default_factory=lambda: _get_env_float("MAX_SWAP_AMOUNT", 100_000.0))


@dataclass
class Config:
    """
    Main configuration container

    Loads all settings from environment variables and .env file.

    Usage:
        from agent_trade.config import config

        print(config.pools.refresh_interval_seconds)
        print(config.signer.account_type)
    """
    raydium: RaydiumConfig = field(default_factory=RaydiumConfig)
    pools: PoolCacheConfig = field(default_factory=PoolCacheConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    sponsor: SponsorConfig = field(default_factory=SponsorConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    evm: EVMConfig = field(default_factory=EVMConfig)
    trading: TradingConfig = field(default_factory=TradingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "agent_trade",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure (default: agent_trade)

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close and remove existing handlers to avoid duplicates on reload
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    # Child loggers inherit handlers from parent
    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.pools",
        f"{logger_name}.modules",
        f"{logger_name}.protocols",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger
