#!/usr/bin/env python3
"""Programmatic registration and publishing example.

This demonstrates using the routing components directly, without HTTP:

* register a trigger in a fresh registry
* publish a batch of events on a channel
* print each event's outcome and the aggregate result
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Mapping, Sequence
from typing import Any

from eventarc_emulator.emulator.config import EmulatorSettings
from eventarc_emulator.emulator.logging import configure_logging
from eventarc_emulator.emulator.routing import (
    EventTrigger,
    PublishDispatcher,
    TriggerRegistration,
    TriggerRegistry,
)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Route events in-process (programmatic example).")
    parser.add_argument("--event-type", default="custom.event", help="Event type to register")
    parser.add_argument("--channel", default="my-channel", help="Channel to use")
    parser.add_argument("--trigger", default="t1", help="Trigger name")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = EmulatorSettings()
    configure_logging(settings.log_level)

    registry = TriggerRegistry(strict=settings.strict_triggers)
    registry.register(
        "demo-project",
        args.trigger,
        EventTrigger(event_type=args.event_type, channel=args.channel),
    )

    def print_delivery(registration: TriggerRegistration, event: Mapping[str, Any]) -> None:
        print(f"-> {registration.trigger_name}: {json.dumps(dict(event))}")

    dispatcher = PublishDispatcher(registry=registry, deliver=print_delivery)
    result = dispatcher.publish(
        args.channel,
        [{"type": args.event_type, "id": "1"}, {"id": "2"}, {"type": "other.event", "id": "3"}],
    )

    for outcome in result.outcomes:
        print(json.dumps(outcome.to_json()))
    print("accepted" if result.accepted else "rejected")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
