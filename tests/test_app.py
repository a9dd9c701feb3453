"""Tests for usage_skills.app -- entry point error handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from usage_skills import app as app_module
from usage_skills.exceptions import ProjectError


@pytest.fixture()
def no_signal_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "_setup_signal_handlers", lambda: None)


class TestMain:
    def test_usage_skills_error_maps_to_exit_code(
        self, isolated_config: Path, no_signal_handlers, monkeypatch, capfd
    ) -> None:
        def _raise(**kwargs):
            raise ProjectError("Failed to read mix.exs: broken")

        monkeypatch.setattr(app_module, "app", _raise)

        with pytest.raises(SystemExit) as excinfo:
            app_module.main()

        assert excinfo.value.code == 3
        assert "Failed to read mix.exs: broken" in capfd.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, no_signal_handlers, monkeypatch, capfd
    ) -> None:
        def _raise(**kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(app_module, "app", _raise)

        with pytest.raises(SystemExit) as excinfo:
            app_module.main()

        assert excinfo.value.code == 1
        logs = list((isolated_config / ".xdg" / "data" / "usage-skills" / "logs").iterdir())
        assert len(logs) == 1
        assert "RuntimeError: kaboom" in logs[0].read_text()
        assert "Debug log:" in capfd.readouterr().err

    def test_keyboard_interrupt_exits_130(
        self, isolated_config: Path, no_signal_handlers, monkeypatch
    ) -> None:
        def _raise(**kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(app_module, "app", _raise)

        with pytest.raises(SystemExit) as excinfo:
            app_module.main()

        assert excinfo.value.code == 130
