"""Explicit outcome types for lookups that can miss.

Callers branch on the concrete class instead of testing for `None`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from core.domain.models import Preset

if TYPE_CHECKING:
    from adapters.flight_recorder import RecordingHandle


@dataclass(frozen=True)
class PresetApplied:
    preset: Preset


@dataclass(frozen=True)
class PresetNotFound:
    target: str
    available: list[str] = field(default_factory=list)


PresetMatch = Union[PresetApplied, PresetNotFound]


@dataclass(frozen=True)
class RecordingFound:
    recording: "RecordingHandle"


@dataclass(frozen=True)
class RecordingNotFound:
    recording_id: int


RecordingLookup = Union[RecordingFound, RecordingNotFound]
