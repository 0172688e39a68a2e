"""Event ingestion and aggregation for the A/B testing platform."""

__version__ = "0.1.0"
