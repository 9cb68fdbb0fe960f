"""Infrastructure layer: persistence adapters."""
