"""Export settings powered by Pydantic BaseSettings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogVerbosity(str, Enum):
    """Threshold for mirroring log lines to the console and progress panel.

    - ALL: Info, warnings and errors
    - WARNING: Warnings and errors
    - ERROR: Errors only
    - NONE: Fatal errors only
    """

    ALL = "all"
    WARNING = "warning"
    ERROR = "error"
    NONE = "none"


class RenderTimings(BaseModel):
    """Timeouts, intervals and settle delays used while rendering.

    Attributes:
        surface_attach_timeout_ms: Budget for the surface to attach.
        section_timeout_ms: Budget for each section render and measure.
        settle_timeout_ms: Budget for transclusions and plugin blocks.
        poll_interval_ms: Interval for every poll.
        canvas_settle_ms: Delay after each canvas fit-to-view.
        drawing_settle_ms: Delay before exporting a drawing.
        generic_settle_ms: Delay before taking a generic view.
        min_snapshot_chars: Encoded canvas snapshots shorter than this are dropped.
        panel_width: Width of the compact progress window.
        panel_height: Height of the compact progress window.
        log_panel_width: Window width once the log is shown.
        log_panel_height: Window height once the log is shown.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    surface_attach_timeout_ms: int = Field(default=2000, ge=0)
    section_timeout_ms: int = Field(default=2000, ge=0)
    settle_timeout_ms: int = Field(default=500, ge=0)
    poll_interval_ms: float = Field(default=1, gt=0)
    canvas_settle_ms: int = Field(default=500, ge=0)
    drawing_settle_ms: int = Field(default=500, ge=0)
    generic_settle_ms: int = Field(default=2000, ge=0)
    min_snapshot_chars: int = Field(default=100, ge=0)
    panel_width: int = 900
    panel_height: int = 400
    log_panel_width: int = 1000
    log_panel_height: int = 500


class ExportSettings(BaseSettings):
    """Centralized export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WEBEXPORT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    log_level: LogVerbosity = LogVerbosity.ALL
    files_to_export: list[str] = Field(default_factory=list)
    json_logs: bool = True
    timings: RenderTimings = Field(default_factory=RenderTimings)


def get_settings() -> ExportSettings:
    """Get a settings instance."""
    return ExportSettings()
