"""Ledger contract interface and adapters."""
