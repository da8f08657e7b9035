"""Tests for process.py module."""

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from fetch_abis.process import ProcessResult, run_logged, tail_log


class TestRunLogged:
    """Tests for run_logged function with mocked subprocess."""

    def test_success(self, tmp_path):
        """Should return the exit code and write a framed log."""
        log_path = tmp_path / "logs" / "cmd.log"

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            result = run_logged(["forc", "build", "--release"], tmp_path, log_path)

        assert isinstance(result, ProcessResult)
        assert result.success is True
        assert result.command == "forc build --release"
        assert result.duration_seconds >= 0
        content = log_path.read_text()
        assert "# Command: forc build --release" in content
        assert "# Exit code: 0" in content

    def test_nonzero_exit_is_returned(self, tmp_path):
        """Should not raise on non-zero exit."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2)
            result = run_logged(["git", "clone", "x"], tmp_path, tmp_path / "a.log")

        assert result.success is False
        assert result.exit_code == 2

    def test_passes_cwd_and_timeout(self, tmp_path):
        """Should forward cwd and timeout to subprocess."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            run_logged(["true"], tmp_path, tmp_path / "a.log", timeout=5)

        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == tmp_path
        assert kwargs["timeout"] == 5
        assert kwargs["stderr"] == subprocess.STDOUT

    def test_echoes_command_with_cwd(self, tmp_path, caplog):
        """Should log the command and its working directory before running."""
        caplog.set_level(logging.INFO, logger="fetch_abis.process")
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            run_logged(["forc", "build", "--release"], tmp_path, tmp_path / "a.log")

        assert caplog.messages == [f"+ forc build --release (cwd: {tmp_path})"]

    def test_timeout_propagates(self, tmp_path):
        """Should note the timeout in the log and re-raise."""
        log_path = tmp_path / "a.log"
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=3)
            with pytest.raises(subprocess.TimeoutExpired):
                run_logged(["git"], tmp_path, log_path, timeout=3)

        assert "TIMEOUT after 3 seconds" in log_path.read_text()


class TestTailLog:
    """Tests for tail_log function."""

    def test_tail(self, tmp_path):
        """Should return the last lines."""
        path = tmp_path / "a.log"
        path.write_text("\n".join(str(i) for i in range(50)))
        assert tail_log(path, lines=2) == "48\n49"

    def test_missing(self, tmp_path):
        """Should return empty string for missing files."""
        assert tail_log(tmp_path / "missing.log") == ""
