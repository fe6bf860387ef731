"""Role configuration — which side of the tee this process runs.

The configuration is assembled once, after every command-line flag has been
read, and is immutable from then on.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from teecp.core.durations import parse_duration_flag


class ConfigurationError(ValueError):
    """Raised for conflicting, missing or misplaced role options."""


class Role(str, Enum):
    """The two runnable roles, plus the value used before one is chosen."""

    UNDEFINED = "undefined"
    HUB = "server"
    LISTENER = "client"


class RoleConfig(BaseModel):
    """Immutable role selection plus the listener's retry budgets.

    ``wait_connection`` of zero means a single connection attempt.
    ``retry_interval`` only matters when ``wait_connection`` is non-zero.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    wait_connection: timedelta = timedelta(0)
    retry_interval: timedelta = timedelta(seconds=1)

    @field_validator("role")
    @classmethod
    def _role_must_be_defined(cls, value: Role) -> Role:
        if value is Role.UNDEFINED:
            raise ValueError("a role must be selected (--server or --client)")
        return value

    @model_validator(mode="after")
    def _hub_takes_no_retry_options(self) -> RoleConfig:
        if self.role is Role.HUB and self.wait_connection != timedelta(0):
            raise ValueError("--wait-connection requires --client")
        return self

    @property
    def is_hub(self) -> bool:
        return self.role is Role.HUB

    @property
    def is_listener(self) -> bool:
        return self.role is Role.LISTENER

    @classmethod
    def from_flags(
        cls,
        *,
        server: int = 0,
        client: int = 0,
        wait_connection: str | None = None,
        retry_interval: str | None = None,
    ) -> RoleConfig:
        """Validate the raw flag values and build the configuration.

        ``server`` and ``client`` are occurrence counts so that repeating a
        role flag is caught the same way as combining both.

        Raises
        ------
        ConfigurationError
            Role flags conflict, repeat or are missing, or retry options
            were given to the hub.
        DurationParseError
            A duration value is malformed.
        """
        role = Role.UNDEFINED
        for wanted, count in ((Role.HUB, server), (Role.LISTENER, client)):
            for _ in range(count):
                if role is not Role.UNDEFINED:
                    raise ConfigurationError(
                        f"already defined as a [{role.value}], "
                        f"cannot be redefined as a [{wanted.value}]"
                    )
                role = wanted

        if role is Role.UNDEFINED:
            raise ConfigurationError("a role must be selected (--server or --client)")

        if role is Role.HUB and (wait_connection is not None or retry_interval is not None):
            raise ConfigurationError(
                "--wait-connection and --retry-interval require --client"
            )

        fields: dict[str, timedelta] = {}
        if wait_connection is not None:
            fields["wait_connection"] = parse_duration_flag(wait_connection)
        if retry_interval is not None:
            fields["retry_interval"] = parse_duration_flag(retry_interval)

        return cls(role=role, **fields)
