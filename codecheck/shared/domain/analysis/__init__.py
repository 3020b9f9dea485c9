"""Similarity analysis seam."""
