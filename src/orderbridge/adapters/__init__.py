"""Adapters connecting orderbridge to supplier formats, storage and remote catalogs."""
