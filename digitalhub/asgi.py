"""Entry point for uvicorn: ``uvicorn digitalhub.asgi:app``."""

from digitalhub.main import create_app

app = create_app()
