"""ASGI entrypoint for the meal dashboard API."""

from meal_dashboard.api.app import create_app
from meal_dashboard.containers import build_container

app = create_app(build_container())
