"""Crypto service interface and adapters."""
