"""
Shared test fixtures for jfr-runner tests.

This module provides:
- An in-memory management connection emulating the flight recorder bean
- Settings that ignore local .env files
- A fake clock/sleep pair for polling tests
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Sequence

import pytest

from core.config import AppSettings

FACILITY = "jdk.management.jfr:type=FlightRecorder"

PROFILING_PRESET = {
    "name": "profile",
    "label": "Profiling",
    "description": "Low overhead profiling",
    "provider": "Oracle",
    "settings": {"jdk.ExecutionSample#enabled": "true", "jdk.ExecutionSample#period": "10 ms"},
}
CONTINUOUS_PRESET = {
    "name": "default",
    "label": "Continuous",
    "description": "Low overhead",
    "provider": "Oracle",
    "settings": {"jdk.ExecutionSample#enabled": "true", "jdk.ExecutionSample#period": "20 ms"},
}


def to_signed(data: bytes) -> list[int]:
    return [b - 256 if b > 127 else b for b in data]


@dataclass
class FakeRecording:
    id: int
    name: str = ""
    options: dict[str, str] = field(default_factory=dict)
    settings: dict[str, str] = field(default_factory=dict)
    states: deque = field(default_factory=lambda: deque(["NEW"]))
    data: bytes = b""
    started: bool = False

    def next_state(self) -> str:
        if len(self.states) > 1:
            return self.states.popleft()
        return self.states[0]


class FakeConnection:
    """In-memory `ManagementConnection` for the flight recorder bean."""

    def __init__(
        self,
        *,
        registered: Sequence[str] = (FACILITY,),
        presets: Sequence[dict[str, Any]] = (CONTINUOUS_PRESET, PROFILING_PRESET),
        default_options: dict[str, str] | None = None,
    ) -> None:
        self.registered = set(registered)
        self.presets = list(presets)
        self.default_options = default_options or {
            "name": "",
            "duration": "0 s",
            "maxAge": "0 s",
            "disk": "true",
        }
        self.recordings: dict[int, FakeRecording] = {}
        self.streams: dict[int, tuple[int, int, int]] = {}
        self.closed_streams: list[int] = []
        self.created: list[tuple[str, str]] = []
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        self._next_id = 1
        self._next_stream = 100

    def add_recording(self, recording_id: int, *, states: Sequence[str] = ("STOPPED",), data: bytes = b"") -> FakeRecording:
        recording = FakeRecording(id=recording_id, name=f"rec-{recording_id}", states=deque(states), data=data)
        self.recordings[recording_id] = recording
        self._next_id = max(self._next_id, recording_id + 1)
        return recording

    def is_registered(self, object_name: str) -> bool:
        self.calls.append((object_name, "isRegistered"))
        return object_name in self.registered

    def create_mbean(self, class_name: str, object_name: str) -> None:
        self.created.append((class_name, object_name))

    def invoke(self, object_name: str, operation: str, arguments: Sequence[Any] = (), signature=None) -> Any:
        self.calls.append((object_name, operation))
        args = list(arguments)
        if operation == "registerMBeans":
            self.registered.add(object_name)
            return None
        assert object_name == FACILITY
        if operation == "newRecording":
            recording = FakeRecording(id=self._next_id, options=dict(self.default_options))
            self.recordings[recording.id] = recording
            self._next_id += 1
            return recording.id
        if operation == "getRecordingOptions":
            return dict(self.recordings[args[0]].options)
        if operation == "setRecordingOptions":
            recording = self.recordings[args[0]]
            assert not recording.started, "options changed after start"
            recording.options.update(args[1])
            recording.name = recording.options.get("name", recording.name)
            return None
        if operation == "setRecordingSettings":
            self.recordings[args[0]].settings = dict(args[1])
            return None
        if operation == "startRecording":
            recording = self.recordings[args[0]]
            recording.started = True
            recording.states = deque(["RUNNING"])
            return None
        if operation == "openStream":
            stream_id = self._next_stream
            self._next_stream += 1
            block = int(args[1].get("blockSize", "50000"))
            self.streams[stream_id] = (args[0], 0, block)
            return stream_id
        if operation == "readStream":
            recording_id, offset, block = self.streams[args[0]]
            data = self.recordings[recording_id].data
            if offset >= len(data):
                return None
            self.streams[args[0]] = (recording_id, offset + block, block)
            return to_signed(data[offset:offset + block])
        if operation == "closeStream":
            self.closed_streams.append(args[0])
            return None
        raise AssertionError(f"unexpected operation {operation}")

    def read_attribute(self, object_name: str, attribute: str) -> Any:
        self.calls.append((object_name, attribute))
        if attribute == "Configurations":
            return list(self.presets)
        if attribute == "Recordings":
            return [
                {"id": r.id, "name": r.name, "state": r.next_state(), "duration": 30}
                for r in self.recordings.values()
            ]
        raise AssertionError(f"unexpected attribute {attribute}")

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class FakeClock:
    """Monotonic clock advanced only by `sleep`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
