"""Flight recorder facility client.

Wraps a `ManagementConnection` and the object name of the flight recorder
management bean, and exposes recordings, presets and data streams as
Python objects. Remote payloads are validated into domain models here so the
lifecycle controller never handles raw JSON.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from core.domain.models import Preset, RecordingInfo, RecordingOptions, as_string_map
from core.errors import ManagementError, RecordingNotFoundError
from core.interfaces.management import ManagementConnection

logger = logging.getLogger(__name__)

_MAP_SIGNATURE = "java.util.Map"


def _to_bytes(value: Any) -> bytes:
    # byte[] travels as a JSON list of signed bytes.
    if value is None:
        return b""
    try:
        return bytes(b & 0xFF for b in value)
    except TypeError as exc:
        raise ManagementError(f"unexpected stream chunk: {value!r}") from exc


class FlightRecorderFacility:
    """Handle on the remote recording facility."""

    def __init__(self, connection: ManagementConnection, object_name: str) -> None:
        self._connection = connection
        self._object_name = object_name

    @property
    def object_name(self) -> str:
        return self._object_name

    def invoke(self, operation: str, *arguments: Any, signature: list[str] | None = None) -> Any:
        return self._connection.invoke(self._object_name, operation, arguments, signature)

    def create_recording(self, name: str) -> "RecordingHandle":
        raw_id = self.invoke("newRecording")
        try:
            recording_id = int(raw_id)
        except (TypeError, ValueError) as exc:
            raise ManagementError(f"newRecording returned a non-numeric id: {raw_id!r}") from exc
        recording = RecordingHandle(self, recording_id, name)
        recording.set_options(RecordingOptions(values={"name": name}))
        logger.debug("created recording %s (%s)", recording_id, name)
        return recording

    def recording_options(self, recording_id: int) -> RecordingOptions:
        raw = self.invoke("getRecordingOptions", recording_id)
        try:
            return RecordingOptions(values=as_string_map(raw))
        except ValueError as exc:
            raise ManagementError(f"malformed recording options: {raw!r}") from exc

    def available_presets(self) -> list[Preset]:
        raw = self._connection.read_attribute(self._object_name, "Configurations")
        presets: list[Preset] = []
        for item in raw or []:
            try:
                presets.append(Preset.model_validate(item))
            except ValidationError as exc:
                raise ManagementError(f"malformed preset: {item!r}") from exc
        return presets

    def recordings(self) -> list[RecordingInfo]:
        raw = self._connection.read_attribute(self._object_name, "Recordings")
        infos: list[RecordingInfo] = []
        for item in raw or []:
            try:
                infos.append(RecordingInfo.model_validate(item))
            except ValidationError as exc:
                raise ManagementError(f"malformed recording info: {item!r}") from exc
        return infos

    def handle(self, info: RecordingInfo) -> "RecordingHandle":
        return RecordingHandle(self, info.id, info.name)


class RecordingHandle:
    """One remote recording, identified by its numeric id."""

    def __init__(
        self,
        facility: FlightRecorderFacility,
        recording_id: int,
        name: str = "",
    ) -> None:
        self._facility = facility
        self.id = recording_id
        self.name = name

    def __repr__(self) -> str:
        return f"RecordingHandle(id={self.id}, name={self.name!r})"

    def set_options(self, options: RecordingOptions) -> None:
        self._facility.invoke(
            "setRecordingOptions", self.id, dict(options.values), signature=["long", _MAP_SIGNATURE]
        )

    def set_event_settings(self, settings: dict[str, str]) -> None:
        self._facility.invoke(
            "setRecordingSettings", self.id, dict(settings), signature=["long", _MAP_SIGNATURE]
        )

    def start(self) -> None:
        self._facility.invoke("startRecording", self.id)

    def info(self) -> RecordingInfo:
        """Fresh snapshot from the facility."""

        for info in self._facility.recordings():
            if info.id == self.id:
                return info
        raise RecordingNotFoundError(self.id)

    def is_running(self) -> bool:
        return self.info().running

    def open_stream(self, block_size: int = 4096) -> "RecordingStream":
        stream_id = self._facility.invoke(
            "openStream", self.id, {"blockSize": str(block_size)}, signature=["long", _MAP_SIGNATURE]
        )
        return RecordingStream(self._facility, int(stream_id))


class RecordingStream:
    """Read-only byte stream over a remote recording's data."""

    def __init__(self, facility: FlightRecorderFacility, stream_id: int) -> None:
        self._facility = facility
        self.stream_id = stream_id
        self._buffer = b""
        self._exhausted = False
        self._closed = False

    def __enter__(self) -> "RecordingStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def read(self, size: int) -> bytes:
        """Up to `size` bytes; `b""` once the remote stream is exhausted."""

        if self._closed:
            raise ValueError("read from closed recording stream")
        while not self._buffer and not self._exhausted:
            chunk = _to_bytes(self._facility.invoke("readStream", self.stream_id))
            if chunk:
                self._buffer = chunk
            else:
                self._exhausted = True
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._facility.invoke("closeStream", self.stream_id)
