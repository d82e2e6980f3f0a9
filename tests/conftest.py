"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from eventarc_emulator.emulator.config import EmulatorSettings
from eventarc_emulator.emulator.routing.dispatcher import PublishDispatcher
from eventarc_emulator.emulator.routing.triggers import TriggerRegistration, TriggerRegistry
from eventarc_emulator.server.app import create_app

_SETTINGS_ENV_VARS = (
    "EVENTARC_EMULATOR_HOST",
    "EVENTARC_EMULATOR_PORT",
    "LOG_LEVEL",
    "EVENTARC_STRICT_TRIGGERS",
    "FUNCTIONS_EMULATOR_URL",
    "EVENTARC_DELIVERY_TIMEOUT_SECONDS",
)


class RecordingHandler:
    """Delivery double that remembers what it was handed."""

    def __init__(self) -> None:
        self.calls: list[tuple[TriggerRegistration, dict[str, Any]]] = []

    def __call__(self, registration: TriggerRegistration, event: Mapping[str, Any]) -> None:
        self.calls.append((registration, dict(event)))

    @property
    def trigger_names(self) -> list[str]:
        return [registration.trigger_name for registration, _ in self.calls]


@pytest.fixture(autouse=True)
def isolated_settings_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's environment or `.env` from leaking into settings."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def registry() -> TriggerRegistry:
    return TriggerRegistry()


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def dispatcher(registry: TriggerRegistry, recorder: RecordingHandler) -> PublishDispatcher:
    return PublishDispatcher(registry=registry, deliver=recorder)


@pytest.fixture
def api(registry: TriggerRegistry, recorder: RecordingHandler) -> TestClient:
    """A TestClient over an app wired to the shared registry and recorder."""
    return TestClient(create_app(EmulatorSettings(), registry=registry, delivery=recorder))
