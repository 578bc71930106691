"""Recording lifecycle orchestration.

This module owns the two workflows the CLI exposes (start a timed recording,
wait for it and dump its data). Side-effects meant for the user (status
lines, warnings) go through `LifecycleHooks` so the same functions can be
driven from tests or other entry-points without a console.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from adapters.file_exporter import DEFAULT_BUFFER_SIZE, write_recording
from adapters.flight_recorder import FlightRecorderFacility, RecordingHandle
from core.config import AppSettings
from core.domain.models import ManagedObject
from core.domain.results import (
    PresetApplied,
    PresetMatch,
    PresetNotFound,
    RecordingFound,
    RecordingLookup,
    RecordingNotFound,
)
from core.errors import PresetNotFoundError, RecordingNotFoundError, RecordingTimeoutError
from core.interfaces.management import ManagementConnection

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


@dataclass
class LifecycleHooks:
    """Optional callbacks for UI layers (status lines, warnings)."""

    status: Callable[[str], None] | None = None
    warning: Callable[[str], None] | None = None

    def emit_status(self, message: str) -> None:
        if self.status:
            self.status(message)
        else:
            logger.info(message)

    def emit_warning(self, message: str) -> None:
        if self.warning:
            self.warning(message)
        else:
            logger.warning(message)


@dataclass
class StartResult:
    recording: RecordingHandle
    preset: PresetMatch


def managed_objects(settings: AppSettings) -> list[ManagedObject]:
    """Objects that must be registered, in registration order."""

    objects: list[ManagedObject] = []
    if settings.coordinator_object_name:
        objects.append(
            ManagedObject(
                object_name=settings.coordinator_object_name,
                class_name=settings.coordinator_class_name,
            )
        )
    objects.append(
        ManagedObject(
            object_name=settings.facility_object_name,
            class_name=settings.facility_class_name,
        )
    )
    return objects


def register_objects(
    connection: ManagementConnection,
    objects: Sequence[ManagedObject],
    register_operation: str,
) -> None:
    for obj in objects:
        if connection.is_registered(obj.object_name):
            logger.debug("%s already registered", obj.object_name)
            continue
        logger.debug("creating %s (%s)", obj.object_name, obj.class_name)
        connection.create_mbean(obj.class_name, obj.object_name)
        connection.invoke(obj.object_name, register_operation, (), ())


def ensure_facility(
    connection: ManagementConnection,
    settings: AppSettings | None = None,
) -> FlightRecorderFacility:
    """Make sure the recording facility is registered and return a handle on it.

    Idempotent: objects already registered are left alone. Over Jolokia the
    create branch always fails (`create_mbean` is unsupported), so missing
    objects must be registered on the target beforehand.
    """

    settings = settings or AppSettings()
    register_objects(connection, managed_objects(settings), settings.register_operation)
    return FlightRecorderFacility(connection, settings.facility_object_name)


def match_preset(facility: FlightRecorderFacility, preset_name: str) -> PresetMatch:
    presets = facility.available_presets()
    for preset in presets:
        if preset.matches(preset_name):
            return PresetApplied(preset)
    return PresetNotFound(preset_name, [p.label or p.name for p in presets])


def start_recording(
    facility: FlightRecorderFacility,
    name: str,
    duration_ms: int,
    preset_name: str = "Profiling",
    *,
    require_preset: bool = False,
    hooks: LifecycleHooks | None = None,
) -> StartResult:
    """Create, configure and start a timed recording.

    Options and event settings are applied before the recording starts. A
    missing preset is reported as `PresetNotFound`, or raised when
    `require_preset` is set, in which case no recording is created.
    """

    if duration_ms <= 0:
        raise ValueError("duration_ms must be strictly positive")
    hooks = hooks or LifecycleHooks()

    match = match_preset(facility, preset_name)
    if isinstance(match, PresetNotFound) and require_preset:
        raise PresetNotFoundError(match.target, match.available)

    recording = facility.create_recording(name)
    defaults = facility.recording_options(recording.id)
    recording.set_options(defaults.with_name(name).with_duration(duration_ms))

    if isinstance(match, PresetApplied):
        recording.set_event_settings(match.preset.settings)
        hooks.emit_status(f"Set event defaults to {preset_name!r} preset")
    else:
        hooks.emit_warning(
            f"Preset {preset_name!r} not available; recording keeps its default event settings"
        )

    recording.start()
    hooks.emit_status("Started recording...")
    return StartResult(recording=recording, preset=match)


def find_recording(facility: FlightRecorderFacility, recording_id: int) -> RecordingLookup:
    for info in facility.recordings():
        if info.id == recording_id:
            return RecordingFound(facility.handle(info))
    return RecordingNotFound(recording_id)


def wait_for_completion(
    recording: RecordingHandle,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_wait: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Block until the recording stops running; return the number of waits.

    Every poll observing "running" is followed by exactly one `sleep`, cut
    short to the remaining budget near the end of `max_wait`. Raises
    `RecordingTimeoutError` once `max_wait` seconds have elapsed.
    """

    started = clock()
    waits = 0
    while recording.is_running():
        waited = clock() - started
        delay = poll_interval
        if max_wait is not None:
            if waited >= max_wait:
                raise RecordingTimeoutError(recording.id, waited)
            delay = min(poll_interval, max_wait - waited)
        sleep(delay)
        waits += 1
    return waits


def dump_recording(
    recording: RecordingHandle,
    output_path: Path,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_wait: float | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    hooks: LifecycleHooks | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Wait for `recording` to finish and copy its data to `output_path`.

    Returns the number of bytes written.
    """

    hooks = hooks or LifecycleHooks()
    wait_for_completion(recording, poll_interval=poll_interval, max_wait=max_wait, sleep=sleep, clock=clock)
    hooks.emit_status(f"Finished recording. Saving to {output_path}")
    with recording.open_stream(buffer_size) as stream:
        return write_recording(source=stream, output_path=output_path, buffer_size=buffer_size)


def dump_recording_by_id(
    facility: FlightRecorderFacility,
    recording_id: int,
    output_path: Path,
    **kwargs,
) -> int:
    lookup = find_recording(facility, recording_id)
    if isinstance(lookup, RecordingNotFound):
        raise RecordingNotFoundError(lookup.recording_id)
    return dump_recording(lookup.recording, output_path, **kwargs)
