"""ASGI entrypoint for the food journal API."""

from food_journal.api.app import create_app
from food_journal.containers import build_container

app = create_app(build_container())
