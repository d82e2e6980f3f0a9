"""CLI entrypoint for the Eventarc emulator.

Subcommands:
- serve:    run the emulator in the foreground
- register: register a trigger with a running emulator
- publish:  publish a batch of events to a running emulator
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

import uvicorn
from pydantic import ValidationError

from eventarc_emulator import __version__
from eventarc_emulator.emulator.client import EmulatorClient
from eventarc_emulator.emulator.config import EmulatorSettings
from eventarc_emulator.emulator.logging import configure_logging
from eventarc_emulator.server.app import create_app

logger = logging.getLogger(__name__)


def _parse_event(value: str) -> dict[str, Any]:
    try:
        event = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"not valid JSON: {e}") from e
    if not isinstance(event, dict):
        raise argparse.ArgumentTypeError("each event must be a JSON object")
    return event


def _default_url(settings: EmulatorSettings) -> str:
    return f"http://{settings.host}:{settings.port}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventarc-emulator",
        description="Local emulator for Eventarc custom event triggers",
    )
    parser.add_argument("--version", action="version", version=f"eventarc-emulator {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the emulator in the foreground")
    serve.add_argument("--host", default=None, help="Listen host (overrides settings)")
    serve.add_argument("--port", type=int, default=None, help="Listen port (overrides settings)")

    register = subparsers.add_parser("register", help="Register a trigger with the emulator")
    register.add_argument("--url", default=None, help="Emulator base URL")
    register.add_argument("--project", required=True, help="Project ID")
    register.add_argument("--trigger", required=True, help="Trigger (function) name")
    register.add_argument("--event-type", required=True, help="Event type to match")
    register.add_argument("--channel", default="", help="Channel to listen on")

    publish = subparsers.add_parser("publish", help="Publish events to a channel")
    publish.add_argument("--url", default=None, help="Emulator base URL")
    publish.add_argument("--project", required=True, help="Project ID")
    publish.add_argument("--location", default="us-central1", help="Channel location")
    publish.add_argument("--channel", required=True, help="Channel to publish to")
    publish.add_argument(
        "--event",
        dest="events",
        type=_parse_event,
        action="append",
        default=[],
        help='Event as a JSON object, e.g. \'{"type": "custom.event"}\' (repeatable)',
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EmulatorSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment / .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            overrides: dict[str, Any] = {}
            if args.host is not None:
                overrides["host"] = args.host
            if args.port is not None:
                overrides["port"] = args.port
            if overrides:
                settings = settings.model_copy(update=overrides)

            logger.info(
                "Starting Eventarc emulator",
                extra={"host": settings.host, "port": settings.port},
            )
            uvicorn.run(
                create_app(settings),
                host=settings.host,
                port=settings.port,
                log_config=None,
                log_level=settings.log_level.lower(),
            )
            return 0

        client = EmulatorClient(args.url or _default_url(settings))
        try:
            if args.command == "register":
                registered = client.register_trigger(
                    project_id=args.project,
                    trigger_name=args.trigger,
                    event_type=args.event_type,
                    channel=args.channel,
                )
                print(f"Registered {args.trigger} for match key {registered.get('matchKey')!r}")
                return 0

            if args.command == "publish":
                response = client.publish_events(
                    project_id=args.project,
                    location=args.location,
                    channel=args.channel,
                    events=args.events,
                )
                for outcome in response.outcomes:
                    print(json.dumps(outcome, ensure_ascii=False))
                if not response.accepted:
                    print("Publish rejected: batch contains invalid events", file=sys.stderr)
                    return 4
                return 0
        finally:
            client.close()

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
