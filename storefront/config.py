"""
Runtime configuration.

Everything comes from environment variables; a local `.env` file is loaded
first when present (existing variables win).

Variables:
- STORE_API_URL: base URL of the store API serving `stock/` and `products/`
- STORE_API_TIMEOUT: request timeout in seconds
- CART_STORAGE_KEY: key the cart snapshot is stored under
- CART_STORAGE_PATH: JSON file used when Redis is not configured
- UPSTASH_REDIS_REST_URL / UPSTASH_REDIS_REST_TOKEN: Redis cache backend
- TELEGRAM_TOKEN / TELEGRAM_CHAT_ID: send cart notifications to a Telegram chat
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_STORE_API_URL = "http://localhost:3333"
DEFAULT_STORAGE_KEY = "cart"
DEFAULT_STORAGE_PATH = "~/.storefront/cart.json"
DEFAULT_TIMEOUT = 10.0


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _int_env(name: str) -> int | None:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    store_api_url: str = DEFAULT_STORE_API_URL
    store_api_timeout: float = DEFAULT_TIMEOUT
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_path: Path = Path(DEFAULT_STORAGE_PATH).expanduser()
    redis_url: str = ""
    redis_token: str = ""
    telegram_token: str = ""
    telegram_chat_id: int | None = None

    @property
    def use_redis(self) -> bool:
        """Redis is used only when both Upstash variables are set."""
        return bool(self.redis_url and self.redis_token)

    @property
    def use_telegram(self) -> bool:
        return bool(self.telegram_token and self.telegram_chat_id is not None)


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    """Load settings from the environment (after reading `.env` if present)."""
    load_dotenv(env_file, override=False)

    return Settings(
        store_api_url=os.environ.get("STORE_API_URL", DEFAULT_STORE_API_URL).rstrip("/"),
        store_api_timeout=_float_env("STORE_API_TIMEOUT", DEFAULT_TIMEOUT),
        storage_key=os.environ.get("CART_STORAGE_KEY", "") or DEFAULT_STORAGE_KEY,
        storage_path=Path(
            os.environ.get("CART_STORAGE_PATH", "") or DEFAULT_STORAGE_PATH
        ).expanduser(),
        redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        telegram_token=os.environ.get("TELEGRAM_TOKEN", ""),
        telegram_chat_id=_int_env("TELEGRAM_CHAT_ID"),
    )
