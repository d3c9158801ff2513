"""Storefront cart: stock-checked cart state persisted across restarts."""

__version__ = "0.1.0"
