"""
Command-line access to the cart.

Usage:
    storefront-cart show
    storefront-cart add 42
    storefront-cart remove 42
    storefront-cart set 42 3
"""
import argparse
import asyncio
import sys
from typing import Optional, Sequence

from storefront.cart import CartResult, CartStore, open_cart_store
from storefront.config import load_settings
from storefront.logging import configure_logging, get_logger
from storefront.services.money import format_money
from storefront.services.notifications import CollectingNotifier, Notifier, TelegramNotifier

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront-cart", description="Manage the storefront cart")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument("--currency", default="USD", help="Currency used to display prices")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("show", help="Print the cart")

    add = commands.add_parser("add", help="Add one unit of a product")
    add.add_argument("product_id", type=int)

    remove = commands.add_parser("remove", help="Remove one unit of a product")
    remove.add_argument("product_id", type=int)

    set_amount = commands.add_parser("set", help="Set the amount of a product already in the cart")
    set_amount.add_argument("product_id", type=int)
    set_amount.add_argument("amount", type=int)

    return parser


def render(store: CartStore, currency: str = "USD") -> str:
    summary = store.summary()
    if summary["is_empty"]:
        return "Cart is empty"

    lines = []
    for item in summary["items"]:
        lines.append(
            f"{item['product_id']:>6}  {item['title'][:40]:<40} "
            f"{item['amount']:>3} x {format_money(item['unit_price'], currency):>12} "
            f"= {format_money(item['subtotal'], currency):>12}"
        )
    lines.append(f"{summary['size']} product(s), {summary['total_items']} unit(s), "
                 f"total {format_money(summary['total'], currency)}")
    return "\n".join(lines)


async def run_command(args: argparse.Namespace, store: CartStore) -> Optional[CartResult]:
    """Apply the requested mutation; `show` has no result."""
    if args.command == "add":
        return await store.add_item(args.product_id)
    if args.command == "remove":
        return await store.remove_item(args.product_id)
    if args.command == "set":
        return await store.set_amount(args.product_id, args.amount)
    return None


async def _main(args: argparse.Namespace) -> int:
    settings = load_settings(args.env_file)
    notifier: Notifier
    if settings.use_telegram:
        notifier = TelegramNotifier.from_settings(settings)
    else:
        notifier = CollectingNotifier()

    store, client = await open_cart_store(settings, notifier=notifier)
    try:
        result = await run_command(args, store)
    finally:
        await client.close()
        if isinstance(notifier, TelegramNotifier):
            await notifier.drain()

    if isinstance(notifier, CollectingNotifier):
        for message in notifier.messages:
            print(message, file=sys.stderr)

    print(render(store, args.currency))
    return 1 if result is not None and not result.ok else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries the rendered cart
    configure_logging(simple=True, stream=sys.stderr)
    return asyncio.run(_main(args))
