"""ASGI entrypoint for the FODMAP helper API."""

from fodmap_helper.api.app import create_app
from fodmap_helper.containers import build_container

app = create_app(build_container())
