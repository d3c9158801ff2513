"""
Cart notification channel.

Notifiers are fire-and-forget: `notify()` returns immediately and never
raises, whatever happens to the message afterwards.
"""

import asyncio
from typing import List, Protocol

import httpx

from storefront.config import Settings
from storefront.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4096


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class LogNotifier:
    """Writes user-facing messages to the log (the default channel)."""

    def notify(self, message: str) -> None:
        logger.warning(f"Cart: {sanitize_string_for_logging(message, max_length=200)}")


class CollectingNotifier:
    """Keeps messages in memory, e.g. for the CLI to print after a command."""

    def __init__(self):
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


class TelegramNotifier:
    """
    Sends messages to a Telegram chat through the Bot API.

    Each message is a single sendMessage request scheduled as a background
    task on the running loop; failures are logged, never retried.
    """

    def __init__(
        self,
        token: str,
        chat_id: int,
        api_url: str = TELEGRAM_API_URL,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.token = token
        self.chat_id = chat_id
        self.api_url = api_url.rstrip("/")
        self._http_client = http_client
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelegramNotifier":
        if not settings.use_telegram:
            raise ValueError("TELEGRAM_TOKEN and TELEGRAM_CHAT_ID must be set")
        return cls(settings.telegram_token, settings.telegram_chat_id)

    def notify(self, message: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, Telegram notification dropped")
            return
        task = loop.create_task(self._send(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self, message: str) -> bool:
        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[:MAX_MESSAGE_LENGTH - 3] + "..."
        url = f"{self.api_url}/bot{self.token}/sendMessage"
        payload = {"chat_id": self.chat_id, "text": message}
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=payload, timeout=10.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=payload, timeout=10.0)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to send Telegram notification to {self.chat_id}: {e}")
            return False

        if response.status_code != 200:
            error_text = response.text[:200] if response.text else "No response body"
            logger.warning(
                f"Telegram API error for {self.chat_id}: status={response.status_code}, response={error_text}"
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait for messages still in flight (before shutting down)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def create_notifier(settings: Settings) -> Notifier:
    if settings.use_telegram:
        return TelegramNotifier.from_settings(settings)
    return LogNotifier()
