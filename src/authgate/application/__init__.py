"""Application layer: use cases composed from domain rules and infrastructure."""
