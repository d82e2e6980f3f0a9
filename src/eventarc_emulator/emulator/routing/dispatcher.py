"""Publish-time matching and dispatch.

Events in a batch are evaluated strictly in index order, each on its own: an
invalid event produces an ``invalid`` outcome but never stops the remaining
events from being matched and delivered. The batch as a whole is accepted only
when no event was invalid.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from eventarc_emulator.emulator.routing.delivery import DeliveryError
from eventarc_emulator.emulator.routing.triggers import (
    TriggerRegistration,
    TriggerRegistry,
    match_key,
)

logger = logging.getLogger(__name__)


class EventHandler(Protocol):
    """Hands a matched event to the trigger's downstream function."""

    def __call__(self, registration: TriggerRegistration, event: Mapping[str, Any]) -> None: ...


class OutcomeStatus(str, Enum):
    DISPATCHED = "dispatched"
    UNMATCHED = "unmatched"
    INVALID = "invalid"
    DELIVERY_FAILED = "delivery_failed"


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    index: int
    status: OutcomeStatus
    event_type: str | None = None
    trigger_name: str | None = None
    error: str | None = None

    def to_json(self) -> dict[str, object]:
        return {
            "index": self.index,
            "status": self.status.value,
            "eventType": self.event_type,
            "triggerName": self.trigger_name,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class PublishResult:
    channel: str
    outcomes: tuple[DeliveryOutcome, ...]

    @property
    def accepted(self) -> bool:
        """True unless some event in the batch was structurally invalid."""

        return not any(o.status is OutcomeStatus.INVALID for o in self.outcomes)

    @property
    def dispatched(self) -> list[DeliveryOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.DISPATCHED]


class PublishDispatcher:
    """Matches published events against a registry and delivers them.

    The dispatcher holds no state of its own between calls; it only reads from
    the registry it was given.
    """

    def __init__(self, *, registry: TriggerRegistry, deliver: EventHandler) -> None:
        self._registry = registry
        self._deliver = deliver

    def publish(self, channel: str | None, events: Sequence[object]) -> PublishResult:
        channel = channel or ""
        outcomes = tuple(
            self._process(index=index, channel=channel, event=event)
            for index, event in enumerate(events)
        )
        result = PublishResult(channel=channel, outcomes=outcomes)
        if not result.accepted:
            logger.info(
                "Rejecting publish batch containing invalid events",
                extra={
                    "channel": channel,
                    "invalid_indexes": [
                        o.index for o in outcomes if o.status is OutcomeStatus.INVALID
                    ],
                },
            )
        return result

    def _process(self, *, index: int, channel: str, event: object) -> DeliveryOutcome:
        event_type = event.get("type") if isinstance(event, Mapping) else None
        if not isinstance(event, Mapping) or not isinstance(event_type, str) or not event_type:
            logger.info("Published event has no type", extra={"channel": channel, "index": index})
            return DeliveryOutcome(index=index, status=OutcomeStatus.INVALID)

        key = match_key(event_type, channel)
        registration = self._registry.lookup(key)
        if registration is None:
            logger.debug("No trigger matches event", extra={"match_key": key, "index": index})
            return DeliveryOutcome(
                index=index, status=OutcomeStatus.UNMATCHED, event_type=event_type
            )

        try:
            self._deliver(registration, event)
        except DeliveryError as e:
            logger.warning(
                "Delivery to trigger failed",
                extra={
                    "match_key": key,
                    "trigger_name": registration.trigger_name,
                    "error": str(e),
                },
            )
            return DeliveryOutcome(
                index=index,
                status=OutcomeStatus.DELIVERY_FAILED,
                event_type=event_type,
                trigger_name=registration.trigger_name,
                error=str(e),
            )
        except Exception as e:
            logger.exception(
                "Event handler raised while delivering to trigger",
                extra={"match_key": key, "trigger_name": registration.trigger_name},
            )
            return DeliveryOutcome(
                index=index,
                status=OutcomeStatus.DELIVERY_FAILED,
                event_type=event_type,
                trigger_name=registration.trigger_name,
                error=f"{type(e).__name__}: {e}",
            )

        logger.debug(
            "Dispatched event",
            extra={"match_key": key, "trigger_name": registration.trigger_name, "index": index},
        )
        return DeliveryOutcome(
            index=index,
            status=OutcomeStatus.DISPATCHED,
            event_type=event_type,
            trigger_name=registration.trigger_name,
        )
