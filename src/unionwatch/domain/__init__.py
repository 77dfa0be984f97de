"""Domain layer: union records, ingestion and reconciliation."""
