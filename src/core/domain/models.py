"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation of what the remote management interface hands back
  (ids, states, settings maps) before the workflow acts on it.
- Immutable value objects: options and presets are never mutated in place.

Note:
- These models describe *what* the recording data is, not *how* it is fetched.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

RUNNING_STATES = frozenset({"RUNNING", "DELAYED"})


def as_string_map(value: Any) -> dict[str, str]:
    """Normalize a remote map into `dict[str, str]`.

    Remote maps arrive either as a plain JSON object or as a list of
    `{"key": ..., "value": ...}` rows (open-type tabular data). Null values
    are dropped so they are never sent back as the string "None".
    """

    if value is None:
        return {}
    if isinstance(value, Mapping):
        rows = value.values()
        if rows and all(isinstance(r, Mapping) and set(r) == {"key", "value"} for r in rows):
            return {str(r["key"]): str(r["value"]) for r in rows if r["value"] is not None}
        return {str(k): str(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        out: dict[str, str] = {}
        for row in value:
            if not isinstance(row, Mapping) or "key" not in row:
                raise ValueError(f"unexpected map row: {row!r}")
            if row.get("value") is not None:
                out[str(row["key"])] = str(row["value"])
        return out
    raise ValueError(f"expected a map, got {type(value).__name__}")


class EndpointAddress(BaseModel):
    """A `host:port` management endpoint."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1, description="Host name or IP address.")
    port: int = Field(..., ge=1, le=65535, description="Management port.")

    @classmethod
    def parse(cls, text: str) -> "EndpointAddress":
        """Parse `host:port` (IPv6 hosts go in brackets: `[::1]:9999`)."""

        raw = text.strip()
        if raw.startswith("["):
            host, sep, rest = raw[1:].partition("]")
            if not sep or not rest.startswith(":"):
                raise ValueError(f"invalid address {text!r}, expected [host]:port")
            port_text = rest[1:]
        else:
            host, sep, port_text = raw.rpartition(":")
            if not sep:
                raise ValueError(f"invalid address {text!r}, expected host:port")
        if not port_text.isdigit():
            raise ValueError(f"invalid port in {text!r}")
        return cls(host=host, port=int(port_text))

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


class ManagedObject(BaseModel):
    """A remote management object that must be registered before use."""

    model_config = ConfigDict(frozen=True)

    object_name: str = Field(..., min_length=1)
    class_name: str = Field(..., min_length=1)


class RecordingOptions(BaseModel):
    """Session-level options applied to a recording before it starts."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, str] = Field(default_factory=dict)

    @property
    def duration(self) -> str | None:
        return self.values.get("duration")

    def with_duration(self, duration_ms: int) -> "RecordingOptions":
        """Copy of these options with the duration overridden (milliseconds)."""

        if duration_ms <= 0:
            raise ValueError("duration_ms must be strictly positive")
        merged = dict(self.values)
        merged["duration"] = f"{duration_ms} ms"
        return RecordingOptions(values=merged)

    def with_name(self, name: str) -> "RecordingOptions":
        merged = dict(self.values)
        merged["name"] = name
        return RecordingOptions(values=merged)


class Preset(BaseModel):
    """A named bundle of event-capture settings offered by the facility."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    label: str | None = None
    description: str | None = None
    provider: str | None = None
    settings: dict[str, str] = Field(default_factory=dict)

    @field_validator("settings", mode="before")
    @classmethod
    def _normalize_settings(cls, value: Any) -> dict[str, str]:
        return as_string_map(value)

    def matches(self, target: str) -> bool:
        """Exact, case-sensitive match on the preset name or its label."""

        return self.name == target or self.label == target


class RecordingInfo(BaseModel):
    """Snapshot of a recording as reported by the facility."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = Field(..., ge=0)
    name: str = ""
    state: str = "NEW"
    duration: int | None = Field(
        default=None,
        description="Duration in seconds as reported remotely (0 or None when unbounded).",
    )

    @property
    def running(self) -> bool:
        return self.state.upper() in RUNNING_STATES
