"""Encryption gateway."""
