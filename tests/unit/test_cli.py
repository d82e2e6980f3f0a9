"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

import eventarc_emulator.emulator.main as cli
from eventarc_emulator.emulator.client import EmulatorClient, PublishResponse


@pytest.fixture(autouse=True)
def _no_logging_reconfigure(monkeypatch: pytest.MonkeyPatch) -> None:
    # configure_logging would swap the root handlers out from under pytest's capture.
    monkeypatch.setattr(cli, "configure_logging", lambda _level: None)


def _patch_client(monkeypatch: pytest.MonkeyPatch) -> Mock:
    client = Mock(spec=EmulatorClient)
    factory = Mock(return_value=client)
    monkeypatch.setattr(cli, "EmulatorClient", factory)
    client.factory = factory
    return client


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_publish_parses_repeated_events() -> None:
    args = cli.build_parser().parse_args(
        ["publish", "--project", "p", "--channel", "ch"]
        + ["--event", '{"type": "a"}', "--event", "{}"]
    )

    assert args.events == [{"type": "a"}, {}]
    assert args.location == "us-central1"


def test_publish_rejects_non_object_event() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(
            ["publish", "--project", "p", "--channel", "c", "--event", "[]"]
        )


def test_register_uses_default_url(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    client = _patch_client(monkeypatch)
    client.register_trigger.return_value = {"matchKey": "evt-ch"}

    code = cli.main(
        ["register", "--project", "p", "--trigger", "t1", "--event-type", "evt", "--channel", "ch"]
    )

    assert code == 0
    client.factory.assert_called_once_with("http://127.0.0.1:9299")
    client.register_trigger.assert_called_once_with(
        project_id="p", trigger_name="t1", event_type="evt", channel="ch"
    )
    assert "evt-ch" in capsys.readouterr().out
    client.close.assert_called_once()


def test_publish_exit_code_reflects_batch_status(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    client = _patch_client(monkeypatch)
    outcomes = [{"index": 0, "status": "dispatched"}, {"index": 1, "status": "invalid"}]
    client.publish_events.return_value = PublishResponse(status_code=400, outcomes=outcomes)

    code = cli.main(
        [
            "publish",
            "--url",
            "http://emulator:9299",
            "--project",
            "p",
            "--channel",
            "ch",
            "--event",
            '{"type": "a"}',
            "--event",
            "{}",
        ]
    )

    assert code == 4
    client.factory.assert_called_once_with("http://emulator:9299")
    printed = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert printed == outcomes


def test_publish_accepted_returns_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _patch_client(monkeypatch)
    client.publish_events.return_value = PublishResponse(status_code=200, outcomes=[])

    assert cli.main(["publish", "--project", "p", "--channel", "ch"]) == 0


def test_unexpected_failure_returns_one(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _patch_client(monkeypatch)
    client.register_trigger.side_effect = RuntimeError("boom")

    code = cli.main(["register", "--project", "p", "--trigger", "t1", "--event-type", "evt"])

    assert code == 1


def test_invalid_configuration_returns_two(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("EVENTARC_EMULATOR_PORT", "not-a-port")

    code = cli.main(["register", "--project", "p", "--trigger", "t1", "--event-type", "evt"])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_serve_applies_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    run = Mock()
    monkeypatch.setattr(cli.uvicorn, "run", run)

    assert cli.main(["serve", "--host", "0.0.0.0", "--port", "9400"]) == 0

    _, kwargs = run.call_args
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9400
