"""Dashboard engine services: ingestion, inference, filtering and aggregation."""
