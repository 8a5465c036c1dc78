"""ASGI entry point: ``uvicorn authgate.infrastructure.api.main:app``."""

from authgate.infrastructure.api.app import create_app

app = create_app()
