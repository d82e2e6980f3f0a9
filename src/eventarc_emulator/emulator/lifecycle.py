"""Start/stop wrapper that runs the emulator's HTTP server on a background thread."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

import uvicorn

from eventarc_emulator.emulator.config import DEFAULT_HOST, DEFAULT_PORT, EmulatorSettings
from eventarc_emulator.emulator.routing.dispatcher import EventHandler
from eventarc_emulator.emulator.routing.triggers import TriggerRegistry
from eventarc_emulator.server.app import create_app

logger = logging.getLogger(__name__)

EMULATOR_NAME = "eventarc"


@dataclass(frozen=True, slots=True)
class EmulatorInfo:
    name: str
    host: str
    port: int


class EventarcEmulator:
    """Owns one registry and the uvicorn server that exposes it."""

    def __init__(
        self,
        settings: EmulatorSettings | None = None,
        *,
        delivery: EventHandler | None = None,
        startup_timeout_seconds: float = 10.0,
    ) -> None:
        self._settings = settings if settings is not None else EmulatorSettings()
        self._registry = TriggerRegistry(strict=self._settings.strict_triggers)
        self._delivery = delivery
        self._startup_timeout_seconds = startup_timeout_seconds

        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def registry(self) -> TriggerRegistry:
        return self._registry

    def get_name(self) -> str:
        return EMULATOR_NAME

    def get_info(self) -> EmulatorInfo:
        return EmulatorInfo(
            name=self.get_name(),
            host=self._settings.host or DEFAULT_HOST,
            port=self._settings.port or DEFAULT_PORT,
        )

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Eventarc emulator is already running")

        info = self.get_info()
        app = create_app(self._settings, registry=self._registry, delivery=self._delivery)
        config = uvicorn.Config(
            app,
            host=info.host,
            port=info.port,
            log_config=None,
            log_level=self._settings.log_level.lower(),
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=server.run,
            name=f"{EMULATOR_NAME}-emulator-{info.port}",
            daemon=True,
        )
        thread.start()

        deadline = time.monotonic() + self._startup_timeout_seconds
        while not server.started:
            if not thread.is_alive():
                raise RuntimeError(f"Eventarc emulator failed to start on {info.host}:{info.port}")
            if time.monotonic() >= deadline:
                server.should_exit = True
                thread.join(timeout=5)
                raise TimeoutError(
                    f"Eventarc emulator did not start within {self._startup_timeout_seconds}s"
                )
            time.sleep(0.05)

        self._server = server
        self._thread = thread
        logger.info("Eventarc emulator started", extra={"host": info.host, "port": info.port})

    def connect(self) -> None:
        # Nothing to connect to; triggers arrive over HTTP from the functions runtime.
        return None

    def stop(self) -> None:
        if self._server is None or self._thread is None:
            return
        self._server.should_exit = True
        self._thread.join(timeout=10)
        self._server = None
        self._thread = None
        logger.info("Eventarc emulator stopped")
