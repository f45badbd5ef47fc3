"""Tests for environment-driven export settings."""

import pytest
from pydantic import ValidationError

from src.settings.app import ExportSettings, LogVerbosity, RenderTimings


class TestExportSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        settings = ExportSettings()
        assert settings.log_level is LogVerbosity.ALL
        assert settings.files_to_export == []
        assert settings.timings.section_timeout_ms == 2000
        assert settings.timings.settle_timeout_ms == 500

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEBEXPORT_LOG_LEVEL", "error")
        monkeypatch.setenv("WEBEXPORT_FILES_TO_EXPORT", '["a.md", "notes"]')

        settings = ExportSettings()

        assert settings.log_level is LogVerbosity.ERROR
        assert settings.files_to_export == ["a.md", "notes"]

    def test_nested_timings(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEBEXPORT_TIMINGS__SECTION_TIMEOUT_MS", "150")

        settings = ExportSettings()

        assert settings.timings.section_timeout_ms == 150
        assert settings.timings.poll_interval_ms == 1


class TestRenderTimings:
    def test_frozen(self) -> None:
        timings = RenderTimings()
        with pytest.raises(ValidationError):
            timings.section_timeout_ms = 10  # type: ignore[misc]

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            RenderTimings(section_timeout=10)  # type: ignore[call-arg]

    def test_rejects_negative_timeouts(self) -> None:
        with pytest.raises(ValidationError):
            RenderTimings(settle_timeout_ms=-1)
