"""UI components for the CLI (Rich).

Why separate components:
- Keeps command logic apart from presentation.
- Every line here goes to stderr: stdout is reserved for the recording id.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

PROG_NAME = "jfr-runner"

START_USAGE = (
    f"Usage: {PROG_NAME} start <host:port> <duration_ms>",
    "   Connect to the management agent on 'host:port' to start recording for 'duration_ms' milliseconds",
)
DUMP_USAGE = (
    f"Usage: {PROG_NAME} dump <host:port> <recording_id> <filename>",
    "   Connect to the management agent on 'host:port' and dump recording 'recording_id' to local filename 'filename'",
)

USAGES = {"start": START_USAGE, "dump": DUMP_USAGE}


def build_console() -> Console:
    """Diagnostic console bound to stderr."""

    return Console(stderr=True, highlight=False, soft_wrap=True)


def print_usage(console: Console, *commands: str) -> None:
    """Print usage for `commands` (both commands when none is given)."""

    for command in commands or tuple(USAGES):
        usage, detail = USAGES[command]
        console.print(Text(usage))
        console.print(Text(detail, style="dim"))


def print_status(console: Console, message: str) -> None:
    console.print(Text(message))


def print_warning(console: Console, message: str) -> None:
    console.print(Text.assemble(("Warning: ", "bold yellow"), message))


def print_error(console: Console, message: str) -> None:
    console.print(Text.assemble(("Error: ", "bold red"), message))
