"""Tests for the command line interface."""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from chatrelay.cli import typer_app
from chatrelay.settings import app_settings

runner = CliRunner()


def test_serve_runs_application_factory():
    with patch("chatrelay.cli.uvicorn.run") as mock_run:
        result = runner.invoke(typer_app, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args == ("chatrelay:application",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9000


def test_send_refuses_blank_text():
    with patch("chatrelay.cli._send", new_callable=AsyncMock) as mock_send:
        result = runner.invoke(typer_app, ["send", "   "])

    assert result.exit_code == 1
    assert "Nothing to send" in result.output
    mock_send.assert_not_called()


def test_send_uses_default_url():
    with patch("chatrelay.cli._send", new_callable=AsyncMock) as mock_send:
        result = runner.invoke(
            typer_app, ["send", "hello", "--keystroke-delay", "0"]
        )

    assert result.exit_code == 0
    url = f"ws://localhost:{app_settings.PORT}{app_settings.WS_PATH}"
    mock_send.assert_awaited_once_with(url, "hello", 0.0)
