"""Pydantic models for the HTTP surface."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from eventarc_emulator.emulator.routing.triggers import EventTrigger


class RegisterTriggerRequest(BaseModel):
    """Body of a trigger registration, as the functions runtime serializes it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event_trigger: EventTrigger | None = Field(default=None, alias="eventTrigger")


class RegisteredTrigger(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    trigger_name: str = Field(alias="triggerName")
    match_key: str = Field(alias="matchKey")
    event_type: str = Field(alias="eventType")
    channel: str


OutcomeStatusName = Literal["dispatched", "unmatched", "invalid", "delivery_failed"]


class ApiOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    status: OutcomeStatusName
    event_type: str | None = Field(default=None, alias="eventType")
    trigger_name: str | None = Field(default=None, alias="triggerName")
    error: str | None = None


class PublishEventsResponse(BaseModel):
    outcomes: list[ApiOutcome] = Field(default_factory=list)
