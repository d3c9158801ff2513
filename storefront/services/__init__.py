"""Collaborators of the cart store: store API client, notifications, money helpers."""
