"""Tests for cross-platform behavior of the logs command."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from kanjiwall.interface.cli import app

runner = CliRunner()


def test_logs_creates_configured_directory(mock_home, monkeypatch):
    log_dir = mock_home / "custom-logs"
    monkeypatch.setenv("KANJIWALL_LOG_DIR", str(log_dir))

    with patch("sys.platform", "linux"), patch("subprocess.run") as mock_run:
        result = runner.invoke(app, ["logs"])

    assert result.exit_code == 0, result.output
    assert log_dir.is_dir()
    mock_run.assert_called_once_with(["xdg-open", str(log_dir.resolve())])


def test_logs_darwin():
    with patch("kanjiwall.interface.cli.resolve_config") as mock_conf:
        mock_config = MagicMock()
        mock_config.log_dir = Path("/tmp/logs")
        mock_conf.return_value = mock_config

        with patch("sys.platform", "darwin"), patch("subprocess.run") as mock_sub:
            result = runner.invoke(app, ["logs"])
            assert result.exit_code == 0
            mock_sub.assert_called_once()
            call_args = mock_sub.call_args[0][0]
            assert call_args[0] == "open"
            assert call_args[1] == str(Path("/tmp/logs"))


def test_logs_mkdir_and_open_win32():
    with patch("kanjiwall.interface.cli.resolve_config") as mock_conf:
        mock_conf.return_value.log_dir.exists.return_value = False

        with patch("sys.platform", "win32"), patch("os.startfile", create=True) as mock_start:
            result = runner.invoke(app, ["logs"])
            assert result.exit_code == 0
            mock_conf.return_value.log_dir.mkdir.assert_called()
            mock_start.assert_called()
