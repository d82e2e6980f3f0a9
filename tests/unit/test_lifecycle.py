"""Unit tests for the emulator start/stop wrapper."""

from __future__ import annotations

import socket

import pytest
import requests

from eventarc_emulator.emulator.config import EmulatorSettings
from eventarc_emulator.emulator.lifecycle import EmulatorInfo, EventarcEmulator

from conftest import RecordingHandler


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


def test_info_uses_defaults() -> None:
    emulator = EventarcEmulator()

    assert emulator.get_name() == "eventarc"
    assert emulator.get_info() == EmulatorInfo(name="eventarc", host="127.0.0.1", port=9299)


def test_info_follows_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENTARC_EMULATOR_HOST", "0.0.0.0")
    monkeypatch.setenv("EVENTARC_EMULATOR_PORT", "9400")

    info = EventarcEmulator(EmulatorSettings()).get_info()

    assert (info.host, info.port) == ("0.0.0.0", 9400)


def test_stop_without_start_is_a_no_op() -> None:
    emulator = EventarcEmulator()
    emulator.connect()
    emulator.stop()


def test_start_serves_registry_and_stop_shuts_down(
    monkeypatch: pytest.MonkeyPatch, recorder: RecordingHandler
) -> None:
    port = _free_port()
    monkeypatch.setenv("EVENTARC_EMULATOR_PORT", str(port))
    emulator = EventarcEmulator(EmulatorSettings(), delivery=recorder)

    emulator.start()
    try:
        with pytest.raises(RuntimeError):
            emulator.start()

        base = f"http://127.0.0.1:{port}"
        assert requests.get(f"{base}/hello_world", timeout=5).status_code == 200

        resp = requests.post(
            f"{base}/emulator/v1/projects/p/triggers/t1",
            json={"eventTrigger": {"eventType": "evt", "channel": "ch"}},
            timeout=5,
        )
        assert resp.status_code == 200
        assert emulator.registry.lookup("evt-ch") is not None

        resp = requests.post(
            f"{base}/v1/projects/p/locations/us-central1/channels/ch:publishEvents",
            json={"events": [{"type": "evt"}]},
            timeout=5,
        )
        assert resp.status_code == 200
        assert recorder.trigger_names == ["t1"]
    finally:
        emulator.stop()

    with pytest.raises(requests.ConnectionError):
        requests.get(f"http://127.0.0.1:{port}/hello_world", timeout=2)
