import json
import logging

import httpx
import pytest

from storefront.config import Settings
from storefront.services.notifications import (
    CollectingNotifier,
    LogNotifier,
    TelegramNotifier,
    create_notifier,
)


def test_log_notifier_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="storefront.services.notifications"):
        LogNotifier().notify("Requested quantity out of stock")

    assert "Requested quantity out of stock" in caplog.text


def test_collecting_notifier():
    notifier = CollectingNotifier()
    notifier.notify("a")
    notifier.notify("b")

    assert notifier.messages == ["a", "b"]


@pytest.mark.asyncio
async def test_telegram_notifier_sends_message():
    requests = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = TelegramNotifier("token", 111, http_client=http_client)

    notifier.notify("Error adding product")
    await notifier.drain()

    assert len(requests) == 1
    assert requests[0].url.path == "/bottoken/sendMessage"
    assert json.loads(requests[0].content) == {"chat_id": 111, "text": "Error adding product"}
    await http_client.aclose()


@pytest.mark.asyncio
async def test_telegram_notifier_swallows_api_errors():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="Forbidden: bot was blocked by the user")

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = TelegramNotifier("token", 111, http_client=http_client)

    assert await notifier._send("hello") is False
    await http_client.aclose()


def test_telegram_notifier_without_loop_drops_message():
    notifier = TelegramNotifier("token", 111)

    notifier.notify("hello")


def test_create_notifier():
    assert isinstance(create_notifier(Settings()), LogNotifier)
    assert isinstance(
        create_notifier(Settings(telegram_token="token", telegram_chat_id=111)), TelegramNotifier
    )
