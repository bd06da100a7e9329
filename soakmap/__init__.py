"""SoakMap data pipeline: spring ingestion and duplicate cleanup."""

__version__ = "0.1.0"
