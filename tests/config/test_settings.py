"""Tests for PlotSettings — flags, env vars, and the config file."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from privateplot.config.settings import DEFAULT_HOST, PlotSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host is None
        assert settings.internal_auth_token is None
        assert settings.request_timeout == 30.0
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.no_interact is False

    def test_default_host_fallback(self, tmp_path: Path) -> None:
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.uses_default_host is True
        assert settings.effective_host == DEFAULT_HOST

    def test_frozen(self, tmp_path: Path) -> None:
        settings = PlotSettings.from_cli(cwd=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestConfigFileSource:
    def test_loads_camel_case_keys(self, tmp_path: Path) -> None:
        (tmp_path / ".privateplot").write_text(
            "instanceHost: blog.example.com\ninternalAuthToken: file-token\n"
        )
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host == "blog.example.com"
        assert settings.internal_auth_token == "file-token"
        assert settings.config_path == tmp_path / ".privateplot"
        assert settings.uses_default_host is False

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "plot.json"
        custom.parent.mkdir()
        custom.write_text('{"instanceHost": "custom.example.com"}')
        settings = PlotSettings.from_cli(config_path=str(custom), cwd=tmp_path)
        assert settings.instance_host == "custom.example.com"
        assert settings.config_path == custom

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".privateplot").write_text("instanceHost: h\ntheme: dark\n")
        assert PlotSettings.from_cli(cwd=tmp_path).instance_host == "h"

    def test_malformed_file_is_click_error(self, tmp_path: Path) -> None:
        (tmp_path / ".privateplot").write_text("- not\n- a mapping\n")
        with pytest.raises(click.ClickException, match="Invalid config"):
            PlotSettings.from_cli(cwd=tmp_path)


class TestPriority:
    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".privateplot").write_text(
            "instanceHost: file.example.com\ninternalAuthToken: file-token\n"
        )
        monkeypatch.setenv("PRIVATEPLOT_HOST", "env.example.com")
        monkeypatch.setenv("INTERNAL_AUTH_TOKEN", "env-token")
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host == "env.example.com"
        assert settings.internal_auth_token == "env-token"

    def test_file_fills_what_env_leaves(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / ".privateplot").write_text(
            "instanceHost: file.example.com\ninternalAuthToken: file-token\n"
        )
        monkeypatch.setenv("PRIVATEPLOT_HOST", "env.example.com")
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host == "env.example.com"
        assert settings.internal_auth_token == "file-token"

    def test_init_kwargs_beat_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRIVATEPLOT_HOST", "env.example.com")
        settings = PlotSettings.from_cli(cwd=tmp_path, instance_host="flag.example.com")
        assert settings.instance_host == "flag.example.com"

    def test_timeout_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRIVATEPLOT_REQUEST_TIMEOUT", "5")
        assert PlotSettings.from_cli(cwd=tmp_path).request_timeout == 5.0


class TestDotEnv:
    def test_reads_dotenv_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text(
            "PRIVATEPLOT_HOST=dotenv.example.com\nINTERNAL_AUTH_TOKEN=from-dotenv\n"
        )
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host == "dotenv.example.com"
        assert settings.internal_auth_token == "from-dotenv"

    def test_process_cwd_when_none_given(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / ".env").write_text("INTERNAL_AUTH_TOKEN=from-dotenv\n")
        monkeypatch.chdir(tmp_path)
        assert PlotSettings.from_cli().internal_auth_token == "from-dotenv"

    def test_env_beats_dotenv(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".env").write_text("INTERNAL_AUTH_TOKEN=from-dotenv\n")
        monkeypatch.setenv("INTERNAL_AUTH_TOKEN", "env-token")
        assert PlotSettings.from_cli(cwd=tmp_path).internal_auth_token == "env-token"

    def test_dotenv_beats_file(self, tmp_path: Path) -> None:
        (tmp_path / ".privateplot").write_text(
            "instanceHost: file.example.com\ninternalAuthToken: file-token\n"
        )
        (tmp_path / ".env").write_text("INTERNAL_AUTH_TOKEN=from-dotenv\n")
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.internal_auth_token == "from-dotenv"
        assert settings.instance_host == "file.example.com"

    def test_unrelated_keys_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("DATABASE_URL=postgres://x\nEDITOR=vim\n")
        settings = PlotSettings.from_cli(cwd=tmp_path)
        assert settings.instance_host is None
