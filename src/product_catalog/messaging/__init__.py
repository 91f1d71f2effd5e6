"""Domain event fan-out and integration event delivery."""
