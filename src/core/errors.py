"""Error taxonomy of the recorder.

Usage errors never reach this module: they are raised by the CLI layer
before any remote call is attempted.
"""

from __future__ import annotations

from typing import Sequence


class RecorderError(Exception):
    """Base class for every error raised by the recorder."""


class ManagementError(RecorderError):
    """A remote management call failed (transport, remote exception, bad payload)."""

    def __init__(self, message: str, *, error_type: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type


class RecordingNotFoundError(RecorderError):
    def __init__(self, recording_id: int) -> None:
        super().__init__(f"No recording with id {recording_id} exists on the target")
        self.recording_id = recording_id


class RecordingTimeoutError(RecorderError):
    def __init__(self, recording_id: int, waited: float) -> None:
        super().__init__(
            f"Recording {recording_id} still running after waiting {waited:.1f} seconds"
        )
        self.recording_id = recording_id
        self.waited = waited


class PresetNotFoundError(RecorderError):
    def __init__(self, preset_name: str, available: Sequence[str] = ()) -> None:
        known = ", ".join(available) if available else "none"
        super().__init__(f"Preset {preset_name!r} not available on the target (available: {known})")
        self.preset_name = preset_name
        self.available = list(available)
