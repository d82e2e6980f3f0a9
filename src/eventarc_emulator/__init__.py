"""Eventarc emulator.

A local stand-in for Eventarc custom events:
- functions register triggers keyed by event type and channel
- published events are matched against those triggers and handed to the
  matching function
"""

__version__ = "0.1.0"

from eventarc_emulator.emulator.config import EmulatorSettings

__all__ = ["__version__", "EmulatorSettings"]
