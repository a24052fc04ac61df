"""ASGI entry point: ``uvicorn myclass.main:app``."""

from .api import create_app

app = create_app()
