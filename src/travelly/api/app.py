"""ASGI entrypoint: uvicorn travelly.api.app:app"""

from travelly.api.factory import create_app

app = create_app()
