"""FastAPI server adapter for the Eventarc emulator.

Design intent:
- Keep matching and delivery in `eventarc_emulator.emulator.routing`
- Keep HTTP concerns (paths, body parsing, status codes) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from eventarc_emulator.server.app import create_app
