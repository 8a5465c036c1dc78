"""Domain layer for AuthGate: entities and pure business rules."""
