"""Domain layer: remote library ingestion and playback queue logic."""
