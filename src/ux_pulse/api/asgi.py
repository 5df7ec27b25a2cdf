"""ASGI entrypoint for the UX analysis API."""

from ux_pulse.api.app import create_app
from ux_pulse.containers import build_container

app = create_app(build_container())
