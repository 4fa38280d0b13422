"""Unit tests for the sshdiff CLI commands."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from sshdiff.cli import main, parse_port
from sshdiff.exceptions import SSHDiffAuthenticationError, SSHDiffConfigError


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_config():
    """Mock the config module."""
    with patch("sshdiff.cli.config") as mock:
        mock.host = None
        mock.port = 22
        mock.username = "tester"
        mock.key_file = None
        mock.is_configured.return_value = False
        mock.get_config_path.return_value = Path("/mock/config")
        yield mock


@pytest.fixture
def patched_channel(mirrored_channel):
    """Make the CLI use the fake remote host instead of SSH."""
    with patch("sshdiff.cli.SSHChannel", return_value=mirrored_channel) as mock_class:
        yield mock_class


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "compare" in result.output
        assert "probe" in result.output
        assert "init" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_argument_is_setup_failure(self, runner):
        result = runner.invoke(main, ["compare"])

        assert result.exit_code == 1
        assert "Missing argument" in result.output

    def test_bad_option_value_is_setup_failure(self, runner, local_tree):
        result = runner.invoke(
            main, ["compare", str(local_tree), "-s", "h", "--timeout", "abc"]
        )

        assert result.exit_code == 1
        assert "'abc' is not a valid float" in result.output

    def test_unknown_command_is_setup_failure(self, runner):
        result = runner.invoke(main, ["nonsense"])

        assert result.exit_code == 1
        assert "No such command" in result.output


class TestParsePort:
    """Tests for parse_port."""

    def test_valid(self):
        assert parse_port("2222") == 2222

    @pytest.mark.parametrize("value", ["abc", "0", "70000", "-1"])
    def test_invalid(self, value):
        with pytest.raises(SSHDiffConfigError):
            parse_port(value)


class TestCompareCommand:
    """Tests for the compare command."""

    def test_clean_tree(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        result = runner.invoke(main, ["compare", str(local_tree), "-s", "example.com"])

        assert result.exit_code == 0
        assert "All done - no differences" in result.output
        assert "=" * len("All done - no differences") in result.output
        assert mirrored_channel.connected
        assert mirrored_channel.closed

    def test_differences_exit_two(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        mirrored_channel.files["/a.txt"] = b"changed"
        del mirrored_channel.files["/sub/b.txt"]

        result = runner.invoke(main, ["compare", str(local_tree), "-s", "example.com"])

        assert result.exit_code == 2
        assert "Difference: /a.txt" in result.output
        assert "Missing: /sub/b.txt" in result.output
        assert "All done - 2 difference(s) found" in result.output

    def test_permission_only_exits_zero(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        mirrored_channel.denied.add("/a.txt")

        result = runner.invoke(main, ["compare", str(local_tree), "-s", "example.com"])

        assert result.exit_code == 0
        assert "Permission denied: /a.txt" in result.output
        assert "unable to check 1 file(s) due to permissions" in result.output

    def test_connection_settings_passed(
        self, runner, mock_config, patched_channel, local_tree
    ):
        result = runner.invoke(
            main,
            [
                "compare",
                str(local_tree),
                "-s",
                "example.com",
                "-p",
                "2222",
                "-u",
                "deploy",
                "--timeout",
                "10",
            ],
        )

        assert result.exit_code == 0
        patched_channel.assert_called_once_with(
            "example.com",
            port=2222,
            username="deploy",
            key_file=None,
            password=None,
            command_timeout=10.0,
        )

    def test_host_from_config(self, runner, mock_config, patched_channel, local_tree):
        mock_config.is_configured.return_value = True
        mock_config.host = "configured.example.com"

        result = runner.invoke(main, ["compare", str(local_tree)])

        assert result.exit_code == 0
        assert patched_channel.call_args.args[0] == "configured.example.com"
        assert patched_channel.call_args.kwargs["username"] == "tester"

    def test_diff_dir_created_and_filled(
        self,
        runner,
        mock_config,
        patched_channel,
        mirrored_channel,
        local_tree,
        tmp_path,
    ):
        mirrored_channel.files["/sub/b.txt"] = b"server version"
        diff_dir = tmp_path / "out" / "diff"

        result = runner.invoke(
            main,
            [
                "-v",
                "compare",
                str(local_tree),
                "-s",
                "example.com",
                "--diff-dir",
                str(diff_dir),
            ],
        )

        assert result.exit_code == 2
        assert (diff_dir / "sub" / "b.txt").read_bytes() == b"server version"
        assert f"Transferred: /sub/b.txt => {diff_dir}/sub/b.txt" in result.output
        assert "Checking: /a.txt [" in result.output

    def test_remote_root(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        result = runner.invoke(
            main,
            ["compare", str(local_tree), "-s", "example.com", "-r", "/srv/site/"],
        )

        # the fake host mirrors the tree at "/", so nothing exists below /srv/site
        assert result.exit_code == 2
        assert "Missing: /a.txt" in result.output
        probed = {
            mirrored_channel.path_from_command(c) for c in mirrored_channel.commands
        }
        assert "/srv/site/a.txt" in probed

    def test_json_output(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        mirrored_channel.files["/a.txt"] = b"changed"

        result = runner.invoke(
            main, ["--json", "compare", str(local_tree), "-s", "example.com"]
        )

        assert result.exit_code == 2
        data = json.loads(result.output)
        assert data["differences"] == 1
        assert data["status"] == "differences_found"
        assert data["files"] == [
            {"path": "/a.txt", "outcome": "mismatch", "transferred_to": None}
        ]

    def test_quiet_prints_only_summary(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        mirrored_channel.files["/a.txt"] = b"changed"

        result = runner.invoke(
            main, ["-q", "compare", str(local_tree), "-s", "example.com"]
        )

        assert result.exit_code == 2
        assert "Difference:" not in result.output
        assert "All done - 1 difference(s) found" in result.output

    @pytest.mark.skipif(
        sys.platform in ("darwin", "win32"),
        reason="filesystem requires UTF-8 file names",
    )
    def test_undecodable_file_name(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        (local_tree / os.fsdecode(b"caf\xe9.txt")).write_bytes(b"latin-1 name\n")

        result = runner.invoke(main, ["compare", str(local_tree), "-s", "example.com"])

        assert result.exit_code == 2
        assert "Missing: /caf\\xe9.txt" in result.output
        assert "All done - 1 difference(s) found" in result.output

    def test_invalid_root_dir(self, runner, mock_config, tmp_path):
        result = runner.invoke(
            main, ["compare", str(tmp_path / "missing"), "-s", "example.com"]
        )

        assert result.exit_code == 1
        assert "Invalid root directory" in result.output

    def test_missing_host(self, runner, mock_config, local_tree):
        result = runner.invoke(main, ["compare", str(local_tree)])

        assert result.exit_code == 1
        assert "No SSH server given" in result.output

    def test_invalid_port(self, runner, mock_config, local_tree):
        result = runner.invoke(
            main, ["compare", str(local_tree), "-s", "example.com", "-p", "port"]
        )

        assert result.exit_code == 1
        assert "Invalid SSH port number - port" in result.output

    def test_missing_key_file(self, runner, mock_config, local_tree, tmp_path):
        result = runner.invoke(
            main,
            [
                "compare",
                str(local_tree),
                "-s",
                "example.com",
                "-i",
                str(tmp_path / "no_key"),
            ],
        )

        assert result.exit_code == 1
        assert "Unable to locate private key file" in result.output

    def test_diff_dir_cannot_be_created(
        self, runner, mock_config, local_tree, tmp_path
    ):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")

        result = runner.invoke(
            main,
            [
                "compare",
                str(local_tree),
                "-s",
                "example.com",
                "-d",
                str(blocker / "diff"),
            ],
        )

        assert result.exit_code == 1
        assert "Unable to create differences directory" in result.output

    def test_authentication_failure(
        self, runner, mock_config, patched_channel, mirrored_channel, local_tree
    ):
        with patch.object(
            mirrored_channel,
            "connect",
            side_effect=SSHDiffAuthenticationError("Unable to authenticate"),
        ):
            result = runner.invoke(
                main, ["compare", str(local_tree), "-s", "example.com"]
            )

        assert result.exit_code == 1
        assert "Unable to authenticate" in result.output
        assert mirrored_channel.commands == []


class TestProbeCommand:
    """Tests for the probe command."""

    def test_probe_hash(self, runner, mock_config, patched_channel):
        result = runner.invoke(main, ["probe", "/a.txt", "-s", "example.com"])

        assert result.exit_code == 0
        assert "  /a.txt" in result.output

    def test_probe_missing(self, runner, mock_config, patched_channel):
        result = runner.invoke(main, ["probe", "/nope", "-s", "example.com"])

        assert result.exit_code == 0
        assert "Missing: /nope" in result.output

    def test_probe_json(self, runner, mock_config, patched_channel, mirrored_channel):
        mirrored_channel.denied.add("/a.txt")

        result = runner.invoke(main, ["--json", "probe", "/a.txt", "-s", "example.com"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == {"path": "/a.txt", "status": "permission_denied", "hash": None}


class TestInitCommand:
    """Tests for the init command."""

    def test_init_saves_config(self, runner, mock_config):
        result = runner.invoke(
            main, ["init"], input="example.com\n2222\ndeploy\n\n"
        )

        assert result.exit_code == 0
        assert "Saved connection defaults for deploy@example.com:2222" in result.output
        assert "Configuration saved successfully" in result.output
        mock_config.save.assert_called_once_with(
            "example.com", port=2222, username="deploy", key_file=None
        )

    def test_init_invalid_port(self, runner, mock_config):
        result = runner.invoke(main, ["init"], input="example.com\nabc\ndeploy\n\n")

        assert result.exit_code == 1
        assert "Initialization failed" in result.output
        mock_config.save.assert_not_called()
