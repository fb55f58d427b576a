"""Tests for the CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import respx
import structlog

from linkhop.interfaces.cli.cli import _parse_args, build_cli_overrides, start

START = "https://vcloud.zip/abc"
TERMINAL = "https://gamerxyt.com/hubcloud.php?host=vcloud&id=abc&token=xyz"


class TestBuildCliOverrides:
    def test_no_flags(self) -> None:
        assert build_cli_overrides(_parse_args([])) == {}

    def test_all_flags(self) -> None:
        args = _parse_args(
            [
                "--log-level",
                "DEBUG",
                "--log-format",
                "json",
                "--max-hops",
                "3",
                "--hop-timeout",
                "2.5",
            ]
        )
        assert build_cli_overrides(args) == {
            "log_level": "DEBUG",
            "log_format": "json",
            "max_hops": 3,
            "hop_timeout_seconds": 2.5,
        }

    def test_resolve_quiets_logging(self) -> None:
        args = _parse_args(["resolve", "tok"])
        assert build_cli_overrides(args) == {"log_level": "ERROR"}

    def test_resolve_requires_token_or_url(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["resolve"])


class TestServe:
    def test_wires_config_logging_and_server(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("environment: test\n", encoding="utf-8")

        with (
            patch("linkhop.interfaces.cli.cli.configure_logging") as configure,
            patch("linkhop.interfaces.cli.cli.create_app") as create_app,
            patch("linkhop.interfaces.cli.cli.uvicorn.run") as run,
        ):
            configure.return_value = {"version": 1}
            create_app.return_value = MagicMock()
            argv = ["--config", str(config_file), "--max-hops", "3"]
            code = start([*argv, "serve", "--port", "9000"])

        assert code == 0
        config = create_app.call_args.args[0]
        assert config.environment == "test"
        assert config.resolver.max_hops == 3
        run.assert_called_once()
        assert run.call_args.kwargs["port"] == 9000
        assert run.call_args.kwargs["log_config"] == {"version": 1}

    def test_serve_is_default(self) -> None:
        with (
            patch("linkhop.interfaces.cli.cli.configure_logging"),
            patch("linkhop.interfaces.cli.cli.create_app"),
            patch("linkhop.interfaces.cli.cli.uvicorn.run") as run,
        ):
            start([])
        run.assert_called_once()


class TestResolveCommand:
    @pytest.fixture(autouse=True)
    def _keep_logs_off_stdout(self):
        # configure_logging is patched out, so structlog would otherwise use
        # its default PrintLogger on stdout and mix log lines into the JSON.
        with structlog.testing.capture_logs():
            yield

    @respx.mock
    def test_prints_json_result(
        self,
        capsys: pytest.CaptureFixture[str],
        hop_page_var: str,
        terminal_page: str,
    ) -> None:
        respx.get(START).respond(200, text=hop_page_var)
        respx.get(TERMINAL).respond(200, text=terminal_page)

        with patch("linkhop.interfaces.cli.cli.configure_logging"):
            code = start(["resolve", "--url", START, "--action", "download"])

        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert body["ok"] is True
        assert body["lastUrl"] == TERMINAL
        assert body["units"][0]["kind"] == "batch"

    @respx.mock
    def test_error_exit_status(self, capsys: pytest.CaptureFixture[str]) -> None:
        respx.get(START).respond(200, text="<p>nothing</p>")

        with patch("linkhop.interfaces.cli.cli.configure_logging"):
            code = start(["resolve", "--url", START])

        assert code == 1
        body = json.loads(capsys.readouterr().out)
        assert body["error"]["kind"] == "extraction_error"
