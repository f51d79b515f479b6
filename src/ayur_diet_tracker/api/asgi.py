"""ASGI entrypoint for the diet tracker API."""

from ayur_diet_tracker.api.app import create_app
from ayur_diet_tracker.containers import build_container

app = create_app(build_container())
