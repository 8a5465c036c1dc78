"""Infrastructure layer: HTTP API, persistence, tokens and outbound services."""
