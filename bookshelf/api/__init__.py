"""HTTP API for book upload and ingestion."""
