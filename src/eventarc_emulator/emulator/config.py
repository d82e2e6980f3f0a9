"""Configuration for the Eventarc emulator.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required: with no configuration the emulator listens on the default
host/port and only logs the events it would deliver.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9299


class EmulatorSettings(BaseSettings):
    """Settings for the emulator process.

    Environment variables:
    - EVENTARC_EMULATOR_HOST            (optional)
    - EVENTARC_EMULATOR_PORT            (optional)
    - LOG_LEVEL                         (optional)
    - EVENTARC_STRICT_TRIGGERS          (optional)
    - FUNCTIONS_EMULATOR_URL            (optional)
    - EVENTARC_DELIVERY_TIMEOUT_SECONDS (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `EmulatorSettings(_env_file=path_to_env)`.
    """

    host: str = Field(
        default=DEFAULT_HOST,
        validation_alias="EVENTARC_EMULATOR_HOST",
        description="Interface the HTTP listener binds to",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        validation_alias="EVENTARC_EMULATOR_PORT",
        description="Port the HTTP listener binds to",
        ge=1,
        le=65535,
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    strict_triggers: bool = Field(
        default=False,
        validation_alias="EVENTARC_STRICT_TRIGGERS",
        description=(
            "If true, registering a trigger whose match key is already held by a different "
            "trigger fails with 409 instead of silently replacing it."
        ),
    )

    functions_emulator_url: str = Field(
        default="",
        validation_alias="FUNCTIONS_EMULATOR_URL",
        description=(
            "Base URL of the local functions emulator, e.g. http://127.0.0.1:5001. "
            "When empty, matched events are logged instead of delivered."
        ),
    )
    delivery_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="EVENTARC_DELIVERY_TIMEOUT_SECONDS",
        description="Timeout (seconds) for each delivery to the functions emulator",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
