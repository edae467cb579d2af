"""ASGI entrypoint for the Frame Lab API."""

from frame_lab.api.app import create_app
from frame_lab.containers import build_container

app = create_app(build_container())
