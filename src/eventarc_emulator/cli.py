"""Console script entrypoint.

The CLI is implemented in `eventarc_emulator.emulator.main`.
"""

from __future__ import annotations

from eventarc_emulator.emulator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
