"""Application services: extraction, ingestion and search orchestration."""
