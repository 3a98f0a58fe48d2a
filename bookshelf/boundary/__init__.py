"""Boundary adapters: relational datastore, blob storage and embedding service."""
