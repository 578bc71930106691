"""Local export of recording data.

Why a plain byte copy:
- The output file holds exactly the bytes of the remote stream, in order,
  with no framing, so any flight-recording tool can open it.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol

DEFAULT_BUFFER_SIZE = 4096


class ByteSource(Protocol):
    def read(self, size: int) -> bytes:
        ...


def copy_stream(source: ByteSource, target: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Copy `source` into `target` through a fixed-size buffer; return the byte count."""

    if buffer_size <= 0:
        raise ValueError("buffer_size must be strictly positive")
    total = 0
    while True:
        chunk = source.read(buffer_size)
        if not chunk:
            break
        target.write(chunk)
        total += len(chunk)
    return total


def write_recording(
    *,
    source: ByteSource,
    output_path: Path,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> int:
    """Write `source` to `output_path` (created or truncated).

    Parent directories are not created: a missing directory is an I/O error.
    """

    with output_path.open("wb") as target:
        return copy_stream(source, target, buffer_size)
