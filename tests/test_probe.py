"""Unit tests for enva.probe — subprocess wrapper (subprocess is mocked)."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from enva.errors import InvocationError
from enva.probe import VersionProbe


class TestVersionProbe:
    @patch("enva.probe.subprocess.run")
    def test_returns_output(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="Python 3.11.4\n", stderr="")
        assert VersionProbe().run(["/venv/bin/python", "--version"]) == "Python 3.11.4\n"

    @patch("enva.probe.subprocess.run")
    def test_passes_timeout_and_separates_stderr(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        VersionProbe(timeout=5).run(["pip", "--version"])
        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout"] == 5
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.PIPE
        assert kwargs["check"] is False

    @patch("enva.probe.subprocess.run")
    def test_stderr_warnings_not_returned(self, mock_run):
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="six==1.16.0\n",
            stderr="WARNING: Ignoring invalid distribution -ip==0.0 (/venv/lib)\n",
        )
        assert VersionProbe().run(["pip", "list", "--format=freeze"]) == "six==1.16.0\n"

    @patch("enva.probe.subprocess.run")
    def test_nonzero_exit_reports_stderr(self, mock_run):
        mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="ERROR: broken\n")
        with pytest.raises(InvocationError, match="exited with status 2: ERROR: broken"):
            VersionProbe().run(["pip", "list"])

    @patch("enva.probe.subprocess.run")
    def test_nonzero_exit_falls_back_to_stdout(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="usage: pip\n", stderr="")
        with pytest.raises(InvocationError, match="exited with status 1: usage: pip"):
            VersionProbe().run(["pip", "bogus"])

    @patch("enva.probe.subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="pip", timeout=1))
    def test_timeout(self, _mock_run):
        with pytest.raises(InvocationError, match="timed out"):
            VersionProbe(timeout=1).run(["pip", "list"])

    @patch("enva.probe.subprocess.run", side_effect=FileNotFoundError("no such file"))
    def test_missing_binary(self, _mock_run):
        with pytest.raises(InvocationError, match="failed to run"):
            VersionProbe().run(["/nope/python", "--version"])
