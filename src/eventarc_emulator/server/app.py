"""FastAPI app factory.

Routes mirror the Eventarc emulator's wire surface: trigger registration from the
functions runtime, event publishing from SDK clients, and a liveness probe.
Matching and delivery live in `eventarc_emulator.emulator.routing`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from eventarc_emulator import __version__
from eventarc_emulator.emulator.config import EmulatorSettings
from eventarc_emulator.emulator.routing.delivery import (
    FunctionsEmulatorDelivery,
    log_only_delivery,
)
from eventarc_emulator.emulator.routing.dispatcher import EventHandler, PublishDispatcher
from eventarc_emulator.emulator.routing.triggers import (
    InvalidTrigger,
    TriggerConflict,
    TriggerRegistration,
    TriggerRegistry,
)
from eventarc_emulator.server.models import (
    ApiOutcome,
    PublishEventsResponse,
    RegisteredTrigger,
    RegisterTriggerRequest,
)

logger = logging.getLogger(__name__)

REGISTER_TRIGGER_ROUTE = "/emulator/v1/projects/{project_id}/triggers/{trigger_name}"
PUBLISH_EVENTS_ROUTE = (
    "/v1/projects/{project_id}/locations/{location}/channels/{channel}:publishEvents"
)

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _to_registered(record: TriggerRegistration) -> RegisteredTrigger:
    return RegisteredTrigger(
        project_id=record.project_id,
        trigger_name=record.trigger_name,
        match_key=record.match_key,
        event_type=record.event_trigger.event_type,
        channel=record.event_trigger.channel,
    )


def _default_delivery(settings: EmulatorSettings) -> EventHandler:
    if settings.functions_emulator_url.strip():
        return FunctionsEmulatorDelivery(
            base_url=settings.functions_emulator_url,
            timeout=settings.delivery_timeout_seconds,
        )
    return log_only_delivery


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw.decode("utf-8") or "null")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Request body is not valid JSON: {e}") from e


def create_app(
    settings: EmulatorSettings | None = None,
    *,
    registry: TriggerRegistry | None = None,
    delivery: EventHandler | None = None,
) -> FastAPI:
    if settings is None:
        settings = EmulatorSettings()
    # An empty registry is falsy (it has __len__), so compare against None.
    if registry is None:
        registry = TriggerRegistry(strict=settings.strict_triggers)
    if delivery is None:
        delivery = _default_delivery(settings)
    dispatcher = PublishDispatcher(registry=registry, deliver=delivery)

    app = FastAPI(
        title="Eventarc Emulator",
        version=__version__,
        description="Local emulator for Eventarc custom event triggers.",
        openapi_url="/emulator/openapi.json",
        docs_url="/emulator/docs",
        redoc_url=None,
    )

    # Expose for request handlers and for the lifecycle wrapper.
    app.state.settings = settings
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    @app.api_route("/hello_world", methods=_ALL_METHODS)
    def hello_world() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(REGISTER_TRIGGER_ROUTE, response_model=RegisteredTrigger)
    async def register_trigger(
        project_id: str, trigger_name: str, request: Request
    ) -> RegisteredTrigger:
        payload = await _read_json(request)
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")

        try:
            body = RegisterTriggerRequest.model_validate(payload)
        except ValidationError as e:
            logger.debug("Malformed event trigger", extra={"trigger_name": trigger_name})
            raise HTTPException(status_code=400, detail=f"Invalid event trigger: {e}") from e

        try:
            record = registry.register(project_id, trigger_name, body.event_trigger)
        except InvalidTrigger as e:
            logger.debug(str(e), extra={"trigger_name": trigger_name})
            raise HTTPException(status_code=400, detail=str(e)) from e
        except TriggerConflict as e:
            logger.warning(str(e), extra={"trigger_name": trigger_name})
            raise HTTPException(status_code=409, detail=str(e)) from e

        logger.info(
            "Registered custom event trigger",
            extra={
                "project_id": project_id,
                "trigger_name": trigger_name,
                "match_key": record.match_key,
            },
        )
        return _to_registered(record)

    @app.get("/emulator/v1/triggers", response_model=list[RegisteredTrigger])
    def list_triggers() -> list[RegisteredTrigger]:
        entries = registry.snapshot()
        return [_to_registered(entries[key]) for key in sorted(entries)]

    @app.post(PUBLISH_EVENTS_ROUTE, response_model=PublishEventsResponse)
    async def publish_events(
        project_id: str, location: str, channel: str, request: Request
    ) -> JSONResponse:
        payload = await _read_json(request)
        events = payload.get("events") if isinstance(payload, dict) else None
        if not isinstance(events, list):
            raise HTTPException(status_code=400, detail="Request body must contain an events list")

        # Delivery may block on HTTP; keep it off the event loop.
        result = await run_in_threadpool(dispatcher.publish, channel, events)

        body = PublishEventsResponse(
            outcomes=[ApiOutcome.model_validate(o.to_json()) for o in result.outcomes]
        )
        return JSONResponse(
            status_code=200 if result.accepted else 400,
            content=body.model_dump(mode="json", by_alias=True),
        )

    @app.api_route("/{full_path:path}", methods=_ALL_METHODS, include_in_schema=False)
    def unknown_route(full_path: str) -> None:
        logger.debug(
            "Eventarc emulator received unknown request", extra={"path": "/" + full_path}
        )
        raise HTTPException(status_code=404, detail="Not Found")

    return app
