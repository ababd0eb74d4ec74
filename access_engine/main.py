"""
ASGI entry point.

Run with:
    uvicorn access_engine.main:app
"""

from .api.main import create_app

app = create_app()
