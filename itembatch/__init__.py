"""Item management service with a concurrent batch processing engine."""
