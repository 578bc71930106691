"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking into the CLI.
- Lets adapters (Jolokia/flight recorder) read config consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "jfr-runner"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "jfr-runner"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "jfr-runner"
    return Path.home() / ".config" / "jfr-runner"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without polluting the Core.
    - A single configuration contract for CLI and adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="JFR_RUNNER_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
        env_parse_none_str="null",
    )

    # Jolokia transport
    jolokia_scheme: str = Field(
        default="http",
        pattern=r"^https?$",
        description="URL scheme of the Jolokia agent endpoint.",
    )
    jolokia_path: str = Field(
        default="/jolokia/",
        min_length=1,
        description="Path of the Jolokia agent on the target host.",
    )
    jolokia_user: str | None = Field(
        default=None,
        description="Basic-auth user for the Jolokia agent (optional).",
    )
    jolokia_password: str | None = Field(
        default=None,
        description="Basic-auth password for the Jolokia agent (optional).",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per management request (seconds).",
    )
    user_agent: str = Field(
        default="jfr-runner/0.1",
        min_length=1,
        description="User-Agent sent to the management endpoint.",
    )

    # Remote management objects
    coordinator_object_name: str | None = Field(
        default=None,
        description=(
            "Platform management coordinator that must be registered before the "
            "recording facility (e.g. 'com.sun.management:type=MissionControl')."
        ),
    )
    coordinator_class_name: str = Field(
        default="com.sun.management.MissionControl",
        min_length=1,
        description="Class used to create the coordinator when it is missing.",
    )
    facility_object_name: str = Field(
        default="jdk.management.jfr:type=FlightRecorder",
        min_length=1,
        description="Object name of the flight recorder management bean.",
    )
    facility_class_name: str = Field(
        default="jdk.management.jfr.FlightRecorderMXBeanImpl",
        min_length=1,
        description="Class used to create the flight recorder bean when it is missing.",
    )
    register_operation: str = Field(
        default="registerMBeans",
        min_length=1,
        description="Operation invoked (no arguments) after creating a management object.",
    )

    # Recording workflow
    recording_name: str = Field(
        default="My Recording",
        min_length=1,
        description="Display name given to recordings created by `start`.",
    )
    preset_name: str = Field(
        default="Profiling",
        min_length=1,
        description="Preset (name or label, case-sensitive) applied as event settings.",
    )
    require_preset: bool = Field(
        default=False,
        description="Fail `start` when the preset is not available on the target.",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Interval between running-status polls in `dump`.",
    )
    max_wait_seconds: float | None = Field(
        default=6 * 60 * 60.0,
        gt=0,
        description="Upper bound on the `dump` wait; `null` disables the bound.",
    )
    copy_buffer_size: int = Field(
        default=4096,
        ge=1,
        le=1024 * 1024,
        description="Size of the intermediate buffer used to copy recording data.",
    )
