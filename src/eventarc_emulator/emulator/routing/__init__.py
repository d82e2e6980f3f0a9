"""Trigger registry and publish-time dispatch.

- `triggers`: match keys and the registry that owns trigger registrations
- `dispatcher`: per-event matching of published batches
- `delivery`: outbound hand-off of matched events to functions
"""

from eventarc_emulator.emulator.routing.delivery import DeliveryError
from eventarc_emulator.emulator.routing.dispatcher import (
    DeliveryOutcome,
    EventHandler,
    OutcomeStatus,
    PublishDispatcher,
    PublishResult,
)
from eventarc_emulator.emulator.routing.triggers import (
    EventTrigger,
    InvalidTrigger,
    TriggerConflict,
    TriggerRegistration,
    TriggerRegistry,
    match_key,
)

__all__ = [
    "DeliveryError",
    "DeliveryOutcome",
    "EventHandler",
    "EventTrigger",
    "InvalidTrigger",
    "OutcomeStatus",
    "PublishDispatcher",
    "PublishResult",
    "TriggerConflict",
    "TriggerRegistration",
    "TriggerRegistry",
    "match_key",
]
