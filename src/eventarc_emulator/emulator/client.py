"""HTTP client for a running Eventarc emulator.

This keeps HTTP calls out of CLI code and makes tests easy (inject a session).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishResponse:
    """Aggregate status plus the per-event outcomes reported by the emulator."""

    status_code: int
    outcomes: list[dict[str, Any]]

    @property
    def accepted(self) -> bool:
        return self.status_code == 200


class EmulatorClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not base_url.strip():
            raise ValueError("base_url is required")
        self._base_url = base_url.strip().rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "eventarc-emulator-client"})

    @property
    def base_url(self) -> str:
        return self._base_url

    def hello(self) -> bool:
        resp = self._session.get(f"{self._base_url}/hello_world", timeout=self._timeout)
        return resp.status_code == 200

    def register_trigger(
        self,
        *,
        project_id: str,
        trigger_name: str,
        event_type: str,
        channel: str = "",
    ) -> dict[str, Any]:
        if not project_id.strip():
            raise ValueError("project_id is required")
        if not trigger_name.strip():
            raise ValueError("trigger_name is required")

        url = f"{self._base_url}/emulator/v1/projects/{project_id}/triggers/{trigger_name}"
        payload = {"eventTrigger": {"eventType": event_type, "channel": channel}}
        resp = self._session.post(url, json=payload, timeout=self._timeout)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        logger.debug("Registered trigger", extra={"trigger_name": trigger_name, "url": url})
        return data

    def publish_events(
        self,
        *,
        project_id: str,
        location: str,
        channel: str,
        events: Sequence[dict[str, Any]],
    ) -> PublishResponse:
        """Publish a batch of events.

        A 400 is returned as a rejected :class:`PublishResponse` rather than raised,
        since it still carries per-event outcomes. Other errors raise.
        """

        url = (
            f"{self._base_url}/v1/projects/{project_id}/locations/{location}"
            f"/channels/{channel}:publishEvents"
        )
        resp = self._session.post(url, json={"events": list(events)}, timeout=self._timeout)
        if resp.status_code != 400:
            resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError:
            data = {}
        outcomes = data.get("outcomes") if isinstance(data, dict) else None
        return PublishResponse(
            status_code=resp.status_code,
            outcomes=outcomes if isinstance(outcomes, list) else [],
        )

    def close(self) -> None:
        self._session.close()
