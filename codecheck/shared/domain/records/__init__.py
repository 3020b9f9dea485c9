"""Record schemas and the cached record view."""
