# config.py
import os
from typing import Mapping, Optional, List

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from services.networks.evm import validate_address

load_dotenv()

DEFAULT_ETHERSCAN_BASE_URL = "https://api.etherscan.io/api"
DEFAULT_DEXSCREENER_BASE_URL = "https://api.dexscreener.com/latest/dex/tokens"

REQUIRED_KEYS = [
    "TRACKED_PUBLIC_KEY",
    "TOKEN_ADDRESS",
    "RPC_URL",
    "ETHERSCAN_API_KEY",
]


class ConfigError(Exception):
    """Raised when the environment holds a value that cannot be used."""


class ConfigStatus(BaseModel):
    is_ready: bool
    missing_keys: List[str]


class AppConfig(BaseModel):
    model_config = {"frozen": True}

    wallet_name: str = "My Wallet"
    tracked_public_key: str
    token_address: str
    token_symbol: str = "TOKEN"
    token_decimals: int = 18
    rpc_url: str
    etherscan_base_url: str = DEFAULT_ETHERSCAN_BASE_URL
    etherscan_api_key: str
    dexscreener_base_url: str = DEFAULT_DEXSCREENER_BASE_URL
    fallback_token_usd_price: float = 1.0
    joined_at: str = "2025-11-01"
    upstream_timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 60
    no_live_data_threshold_usd: float = 1.0
    negligible_value_usd: float = 1.0

    @field_validator("tracked_public_key", "token_address")
    @classmethod
    def check_address(cls, v: str) -> str:
        return validate_address(v)

    @field_validator("rpc_url")
    @classmethod
    def check_rpc_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("RPC URL must start with http:// or https://")
        return v

    @field_validator("token_decimals", "cache_ttl_seconds")
    @classmethod
    def check_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("fallback_token_usd_price", "upstream_timeout_seconds")
    @classmethod
    def check_positive_number(cls, v: float) -> float:
        if not v > 0 or v == float("inf"):
            raise ValueError("must be a positive finite number")
        return v

    @field_validator("no_live_data_threshold_usd", "negligible_value_usd")
    @classmethod
    def check_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v


# env name -> AppConfig field, for optional settings with defaults
OPTIONAL_KEYS = {
    "WALLET_NAME": "wallet_name",
    "TOKEN_SYMBOL": "token_symbol",
    "TOKEN_DECIMALS": "token_decimals",
    "ETHERSCAN_BASE_URL": "etherscan_base_url",
    "DEXSCREENER_BASE_URL": "dexscreener_base_url",
    "FALLBACK_TOKEN_USD_PRICE": "fallback_token_usd_price",
    "JOINED_AT": "joined_at",
    "UPSTREAM_TIMEOUT_SECONDS": "upstream_timeout_seconds",
    "CACHE_TTL_SECONDS": "cache_ttl_seconds",
    "NO_LIVE_DATA_THRESHOLD_USD": "no_live_data_threshold_usd",
    "NEGLIGIBLE_VALUE_USD": "negligible_value_usd",
}


def get_config_status(environ: Optional[Mapping[str, str]] = None) -> ConfigStatus:
    env = os.environ if environ is None else environ
    missing = [key for key in REQUIRED_KEYS if not env.get(key)]
    return ConfigStatus(is_ready=not missing, missing_keys=missing)


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the application config from environment variables.

    Empty optional values fall back to their defaults. Raises ConfigError
    naming the offending variables when a required key is missing or a
    value fails validation.
    """
    env = os.environ if environ is None else environ

    status = get_config_status(env)
    if not status.is_ready:
        raise ConfigError(f"Missing required env: {', '.join(status.missing_keys)}")

    values = {key.lower(): env[key].strip() for key in REQUIRED_KEYS}
    for env_key, field in OPTIONAL_KEYS.items():
        raw = env.get(env_key)
        if raw is not None and raw.strip():
            values[field] = raw.strip()

    try:
        return AppConfig(**values)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
        raise ConfigError(f"Invalid value in env: {', '.join(fields)}") from e


_cached_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reset_config_cache() -> None:
    global _cached_config
    _cached_config = None
