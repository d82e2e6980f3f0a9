"""Trigger registry.

Triggers are indexed by their match key, ``f"{event_type}-{channel}"``. Each key
holds at most one registration: a later registration for the same key replaces
the earlier one (last write wins). There is no unregister operation; entries live
as long as the owning registry.
"""

from __future__ import annotations

import logging
import threading

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class InvalidTrigger(ValueError):
    """Raised when a registration is missing its event trigger or event type."""


class TriggerConflict(ValueError):
    """Raised in strict mode when a match key is already held by another trigger."""

    def __init__(self, existing: TriggerRegistration) -> None:
        super().__init__(
            f"Match key {existing.match_key!r} is already registered to "
            f"{existing.project_id}/{existing.trigger_name}"
        )
        self.existing = existing


class EventTrigger(BaseModel):
    """The event-matching criteria of a trigger, as sent by the functions runtime."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    event_type: str = Field(default="", alias="eventType")
    channel: str = Field(default="")

    @field_validator("event_type", "channel", mode="before")
    @classmethod
    def _null_is_unset(cls, value: object) -> object:
        # Proto3 JSON encodes an unset scalar as null.
        return "" if value is None else value


class TriggerRegistration(BaseModel):
    """A stored trigger: who registered it and what it matches."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    trigger_name: str
    event_trigger: EventTrigger

    @property
    def match_key(self) -> str:
        return match_key(self.event_trigger.event_type, self.event_trigger.channel)


def match_key(event_type: str, channel: str | None = None) -> str:
    """Compose the registry key for an event type on a channel.

    The format is observable by external callers, so it must stay exactly
    ``<eventType>-<channel>``. An unset channel is the empty string.
    """

    return f"{event_type}-{channel or ''}"


class TriggerRegistry:
    """In-memory map of match key -> the single registration currently holding it.

    All access goes through one lock. Critical sections are a dict read or write,
    so readers never observe a half-written entry and the last completed
    ``register`` for a key is the one that sticks.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._strict = strict
        self._entries: dict[str, TriggerRegistration] = {}
        self._lock = threading.Lock()

    @property
    def strict(self) -> bool:
        return self._strict

    def register(
        self,
        project_id: str,
        trigger_name: str,
        event_trigger: EventTrigger | None,
    ) -> TriggerRegistration:
        """Store ``event_trigger`` under its match key, replacing any previous holder.

        Raises:
            InvalidTrigger: If ``event_trigger`` is missing or has no event type.
            TriggerConflict: In strict mode, if a different registration holds the key.
        """

        if event_trigger is None:
            raise InvalidTrigger(f"Missing event trigger for {trigger_name}")
        if not event_trigger.event_type:
            raise InvalidTrigger(f"Missing event type for {trigger_name}")

        record = TriggerRegistration(
            project_id=project_id,
            trigger_name=trigger_name,
            event_trigger=event_trigger,
        )
        key = record.match_key

        with self._lock:
            previous = self._entries.get(key)
            if previous is not None and previous != record:
                if self._strict:
                    raise TriggerConflict(previous)
                logger.info(
                    "Replacing trigger registered for match key",
                    extra={
                        "match_key": key,
                        "evicted_trigger": previous.trigger_name,
                        "trigger_name": trigger_name,
                    },
                )
            self._entries[key] = record

        return record

    def lookup(self, key: str) -> TriggerRegistration | None:
        with self._lock:
            return self._entries.get(key)

    def snapshot(self) -> dict[str, TriggerRegistration]:
        """Return a copy of all entries, safe to iterate without holding the lock."""

        with self._lock:
            return dict(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
