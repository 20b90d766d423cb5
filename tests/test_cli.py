"""Unit tests for the pybitburner CLI commands."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pybitburner.cli import build_config, main
from pybitburner.config import CONFIG_FILE_NAME, BridgeConfig
from pybitburner.exceptions import BitburnerConfigError, BitburnerMismatchError
from pybitburner.sync import MismatchPolicy


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


def _close_coroutine(coro):
    """Stand-in for asyncio.run that does not start the bridge."""
    coro.close()


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands and global options."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Bitburner" in result.output
        assert "--port" in result.output
        assert "--on-mismatch" in result.output
        assert "run" in result.output
        assert "save-config" in result.output

    def test_invalid_mismatch_policy(self, runner):
        """Test that unknown policies are rejected by click."""
        result = runner.invoke(main, ["--on-mismatch", "merge", "run"])
        assert result.exit_code == 2


class TestBuildConfig:
    """Tests for merging options over the config file."""

    def test_defaults_without_file(self, runner):
        """Test that missing options and file give the defaults."""
        with runner.isolated_filesystem():
            config = build_config({"port": None, "ignore": ()})
        assert config == BridgeConfig()

    def test_options_override_file(self, runner):
        """Test that given options win over saved settings."""
        with runner.isolated_filesystem():
            Path(CONFIG_FILE_NAME).write_text(
                json.dumps({"port": 2000, "base_dir": "./scripts"})
            )
            config = build_config({"port": 3000, "ignore": ("a/", "b/")})

        assert config.port == 3000
        assert config.base_dir == "./scripts"
        assert config.ignore == ["a/", "b/"]

    def test_invalid_values_raise(self, runner):
        """Test that out-of-range values are rejected."""
        with runner.isolated_filesystem():
            with pytest.raises(BitburnerConfigError):
                build_config({"port": 70000})


class TestSaveConfigCommand:
    """Tests for the save-config command."""

    def test_save_config_writes_file(self, runner):
        """Test that save-config stores defaults merged with options."""
        with runner.isolated_filesystem():
            result = runner.invoke(
                main,
                [
                    "--port",
                    "12000",
                    "--ignore",
                    "tmp/",
                    "--ignore",
                    "old/",
                    "--on-mismatch",
                    "UPLOAD",
                    "save-config",
                ],
            )

            assert result.exit_code == 0
            assert "Configuration saved to" in result.output
            data = json.loads(Path(CONFIG_FILE_NAME).read_text())

        assert data == {
            "port": 12000,
            "base_dir": "./src",
            "def_file": "./types/NetscriptDefinitions.d.ts",
            "poll_delay_ms": 500,
            "ignore": ["tmp/", "old/"],
            "on_mismatch": "upload",
        }

    def test_save_config_invalid_file(self, runner):
        """Test that a corrupt config file is reported."""
        with runner.isolated_filesystem():
            Path(CONFIG_FILE_NAME).write_text("{not json")
            result = runner.invoke(main, ["save-config"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_save_config_non_numeric_port_in_file(self, runner):
        """Test that a bad value in the file is an error, not a traceback."""
        with runner.isolated_filesystem():
            Path(CONFIG_FILE_NAME).write_text(json.dumps({"port": "abc"}))
            result = runner.invoke(main, ["save-config"])

        assert result.exit_code == 1
        assert "port must be a number" in result.output
        assert not isinstance(result.exception, ValueError)


class TestRunCommand:
    """Tests for the run command."""

    @patch("pybitburner.cli.asyncio.run", side_effect=_close_coroutine)
    @patch("pybitburner.cli.BitburnerBridge")
    def test_run_builds_bridge_from_options(self, mock_bridge_class, _run, runner):
        """Test that run starts the bridge with the merged config."""
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["--port", "13000", "run"])

        assert result.exit_code == 0
        assert "Press Ctrl+C to exit." in result.output
        assert "Waiting for Bitburner to connect..." in result.output
        config = mock_bridge_class.call_args.args[0]
        assert config.port == 13000
        assert config.on_mismatch is MismatchPolicy.FAIL

    @patch("pybitburner.cli.asyncio.run")
    @patch("pybitburner.cli.BitburnerBridge")
    def test_run_mismatch_exits_with_error(self, _bridge, mock_run, runner):
        """Test that an initial mismatch is printed and exits non-zero."""

        def fail(coro):
            coro.close()
            raise BitburnerMismatchError(["a.js"])

        mock_run.side_effect = fail
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run"])

        assert result.exit_code == 1
        assert "a.js" in result.output

    @patch("pybitburner.cli.asyncio.run")
    @patch("pybitburner.cli.BitburnerBridge")
    def test_run_port_in_use(self, _bridge, mock_run, runner):
        """Test that a listen failure is reported."""

        def fail(coro):
            coro.close()
            raise OSError(98, "Address already in use")

        mock_run.side_effect = fail
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["--port", "12525", "run"])

        assert result.exit_code == 1
        assert "Cannot listen on port 12525" in result.output

    @patch("pybitburner.cli.asyncio.run")
    @patch("pybitburner.cli.BitburnerBridge")
    def test_run_keyboard_interrupt(self, _bridge, mock_run, runner):
        """Test that Ctrl+C stops cleanly."""

        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        mock_run.side_effect = interrupt
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run"])

        assert result.exit_code == 0
        assert "Stopped." in result.output

    @patch("pybitburner.cli.BitburnerBridge")
    def test_run_invalid_config(self, mock_bridge_class, runner):
        """Test that invalid settings exit before starting the bridge."""
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["--poll-delay-ms=-5", "run"])

        assert result.exit_code == 1
        assert "Poll delay" in result.output
        mock_bridge_class.assert_not_called()
