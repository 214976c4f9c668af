"""Medusa storefront: product cache, cart synchronization and session auth."""

__version__ = "0.1.0"
