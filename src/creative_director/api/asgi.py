"""ASGI entrypoint for the creative director API."""

from creative_director.api.app import create_app
from creative_director.containers import build_container

app = create_app(build_container())
