"""Command-line entry point.

Two commands:
- `start <host:port> <duration_ms>`: start a timed recording, print its id on stdout.
- `dump <host:port> <recording_id> <filename>`: wait for it and save its data.

Argument problems are reported with usage text and exit status 64 before any
remote connection is attempted.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import typer

from adapters.jolokia import connect
from cli.ui_components import (
    PROG_NAME,
    USAGES,
    build_console,
    print_error,
    print_status,
    print_usage,
    print_warning,
)
from core.config import AppSettings
from core.domain.models import EndpointAddress
from core.errors import PresetNotFoundError, RecordingNotFoundError, RecordingTimeoutError
from core.services.recording_lifecycle import (
    LifecycleHooks,
    dump_recording_by_id,
    ensure_facility,
    start_recording,
)

EX_USAGE = 64
EX_FAILURE = 1
JAVA_LONG_MAX = 2**63 - 1

# typer may bundle its own click; take the base class from its exported subclass.
UsageError: type[Exception] = next(
    cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "UsageError"
)

app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    help="Start and dump flight recordings on a remote JVM.",
)

_console = build_console()


def _hooks() -> LifecycleHooks:
    return LifecycleHooks(
        status=lambda message: print_status(_console, message),
        warning=lambda message: print_warning(_console, message),
    )


def _parse_address(value: str) -> EndpointAddress:
    try:
        return EndpointAddress.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every management request."),
) -> None:
    _configure_logging(verbose)


@app.command()
def start(
    address: str = typer.Argument(..., metavar="<host:port>", help="Management agent address."),
    duration_ms: int = typer.Argument(
        ..., metavar="<duration_ms>", min=1, max=JAVA_LONG_MAX, help="Recording duration in milliseconds."
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Recording display name."),
    preset: Optional[str] = typer.Option(None, "--preset", help="Preset whose event settings are applied."),
    strict_preset: bool = typer.Option(False, "--strict-preset", help="Fail when the preset is missing."),
) -> None:
    """Start a timed recording and print its id."""

    endpoint = _parse_address(address)
    settings = AppSettings()
    print_status(
        _console,
        f"Attempting to connect to host {endpoint} to record for {duration_ms} milliseconds",
    )

    with connect(endpoint, settings) as connection:
        facility = ensure_facility(connection, settings)
        result = start_recording(
            facility,
            name or settings.recording_name,
            duration_ms,
            preset or settings.preset_name,
            require_preset=strict_preset or settings.require_preset,
            hooks=_hooks(),
        )
    typer.echo(result.recording.id)


@app.command()
def dump(
    address: str = typer.Argument(..., metavar="<host:port>", help="Management agent address."),
    recording_id: int = typer.Argument(
        ..., metavar="<recording_id>", min=1, max=JAVA_LONG_MAX, help="Id printed by `start`."
    ),
    filename: Path = typer.Argument(..., metavar="<filename>", dir_okay=False, help="Local output file."),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", min=0.01, help="Seconds between running-status polls."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.01, help="Give up after waiting this many seconds."
    ),
) -> None:
    """Wait for a recording to finish and save its data to a local file."""

    endpoint = _parse_address(address)
    settings = AppSettings()
    print_status(
        _console,
        f"Attempting to connect to host {endpoint} to dump recording id {recording_id}; "
        f"results will be stored to local file {filename}",
    )

    with connect(endpoint, settings) as connection:
        facility = ensure_facility(connection, settings)
        written = dump_recording_by_id(
            facility,
            recording_id,
            filename,
            poll_interval=poll_interval or settings.poll_interval_seconds,
            max_wait=timeout or settings.max_wait_seconds,
            buffer_size=settings.copy_buffer_size,
            hooks=_hooks(),
        )
    print_status(_console, f"Wrote {written} bytes to {filename}")


def _normalize_args(args: list[str]) -> list[str]:
    # Command names are case-insensitive.
    for index, arg in enumerate(args):
        if arg.startswith("-"):
            continue
        if arg.lower() in USAGES:
            args[index] = arg.lower()
        break
    return args


def _usage_command(exc: Exception) -> str | None:
    ctx = getattr(exc, "ctx", None)
    while ctx is not None:
        if ctx.info_name in USAGES:
            return ctx.info_name
        ctx = ctx.parent
    return None


def run(argv: Sequence[str] | None = None) -> None:
    """Run the CLI; exits 64 on usage errors and 1 on recording errors."""

    args = _normalize_args(list(sys.argv[1:] if argv is None else argv))
    if not args:
        print_usage(_console)
        raise SystemExit(EX_USAGE)

    try:
        code = app(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except UsageError as exc:
        print_error(_console, exc.format_message())  # type: ignore[attr-defined]
        command = _usage_command(exc)
        if command:
            print_usage(_console, command)
        else:
            print_usage(_console)
        raise SystemExit(EX_USAGE) from None
    except typer.Abort:
        raise SystemExit(EX_FAILURE) from None
    except (RecordingNotFoundError, RecordingTimeoutError, PresetNotFoundError) as exc:
        print_error(_console, str(exc))
        raise SystemExit(EX_FAILURE) from None

    if isinstance(code, int) and code:
        raise SystemExit(code)
