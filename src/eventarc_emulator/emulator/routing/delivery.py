"""Outbound delivery of matched events to locally running functions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from eventarc_emulator.emulator.routing.triggers import TriggerRegistration

logger = logging.getLogger(__name__)

CLOUD_EVENTS_CONTENT_TYPE = "application/cloudevents+json"


class DeliveryError(RuntimeError):
    """Raised when a matched trigger's function could not be reached."""


def log_only_delivery(registration: TriggerRegistration, event: Mapping[str, Any]) -> None:
    """Record the delivery without calling anything.

    Used when no functions emulator is configured.
    """

    logger.info(
        "Dispatching event to trigger",
        extra={
            "project_id": registration.project_id,
            "trigger_name": registration.trigger_name,
            "event_type": event.get("type"),
            "event_id": event.get("id"),
        },
    )


class FunctionsEmulatorDelivery:
    """POST each matched event to the functions emulator's background trigger route."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("base_url is required")
        self._base_url = base_url.strip().rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "eventarc-emulator"})

    def trigger_url(self, registration: TriggerRegistration) -> str:
        return (
            f"{self._base_url}/functions/projects/{registration.project_id}"
            f"/triggers/{registration.trigger_name}"
        )

    def __call__(self, registration: TriggerRegistration, event: Mapping[str, Any]) -> None:
        url = self.trigger_url(registration)
        try:
            resp = self._session.post(
                url,
                json=dict(event),
                headers={"Content-Type": CLOUD_EVENTS_CONTENT_TYPE},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Failed to reach {url}: {e}") from e

        if not resp.ok:
            raise DeliveryError(f"Function at {url} responded with HTTP {resp.status_code}")

        logger.debug(
            "Delivered event to function",
            extra={"url": url, "status_code": resp.status_code},
        )

    def close(self) -> None:
        self._session.close()
