"""CLI interface for sshdiff."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from . import __version__
from .channel import SSHChannel
from .compare import (
    CompareEngine,
    ExitStatus,
    ProbeStatus,
    RemoteHashOracle,
    TraversalContext,
)
from .config import config
from .exceptions import SSHDiffConfigError, SSHDiffError
from .output import OutputFormatter
from .utils import DEFAULT_SSH_PORT

logger = logging.getLogger(__name__)


def connection_options(func: Callable) -> Callable:
    """Add the SSH connection options shared by remote commands."""
    options = [
        click.option("--host", "-s", help="Target SSH server address/host"),
        click.option(
            "--port",
            "-p",
            help=f"SSH port number (default: {DEFAULT_SSH_PORT})",
        ),
        click.option(
            "--user",
            "-u",
            help="User for SSH login (default: current shell user)",
        ),
        click.option(
            "--key-file",
            "-i",
            type=click.Path(path_type=Path),
            help="Private key file (default: SSH agent and ~/.ssh keys)",
        ),
        click.option(
            "--password",
            envvar="SSHDIFF_PASSWORD",
            help="Password or private key passphrase",
        ),
        click.option(
            "--timeout",
            type=float,
            default=None,
            help="Seconds to wait for each remote command (default: no limit)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def parse_port(value: str) -> int:
    """Validate an SSH port number given on the command line.

    Raises:
        SSHDiffConfigError: If the value is not a port number
    """
    if not value.isdigit() or not 0 < int(value) <= 65535:
        raise SSHDiffConfigError(f"Invalid SSH port number - {value}")
    return int(value)


def build_channel(
    host: Optional[str],
    port: Optional[str],
    user: Optional[str],
    key_file: Optional[Path],
    password: Optional[str],
    timeout: Optional[float],
) -> SSHChannel:
    """Resolve connection settings against the config and create a channel.

    Raises:
        SSHDiffConfigError: If settings are missing or invalid
    """
    if not host:
        if not config.is_configured():
            raise SSHDiffConfigError(
                "No SSH server given - use --host or run 'sshdiff init'"
            )
        host = config.host

    key_file = key_file or config.key_file
    if key_file is not None and not key_file.is_file():
        raise SSHDiffConfigError(f"Unable to locate private key file - {key_file}")

    return SSHChannel(
        host,
        port=parse_port(port) if port else config.port,
        username=user or config.username,
        key_file=key_file,
        password=password,
        command_timeout=timeout,
    )


class SSHDiffGroup(click.Group):
    """Command group that exits with 1 on usage errors; 2 means differences."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = ExitStatus.SETUP_FAILURE
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = ExitStatus.SETUP_FAILURE
            raise


@click.group(cls=SSHDiffGroup)
@click.option("--quiet", "-q", is_flag=True, help="Only print the final summary")
@click.option("--json", is_flag=True, help="Output results in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Report every checked file and enable debug logging",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """sshdiff - Compare a local directory tree with its copy on an SSH server."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("sshdiff").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)
    # paramiko logs every packet at DEBUG
    logging.getLogger("paramiko").setLevel(logging.WARNING)


@main.command()
@click.argument("root_dir", type=click.Path(path_type=Path))
@connection_options
@click.option(
    "--remote-root",
    "-r",
    default="",
    help="Remote directory mirroring ROOT_DIR (default: the remote filesystem root)",
)
@click.option(
    "--diff-dir",
    "-d",
    type=click.Path(path_type=Path),
    help="Copy differing remote files into this directory",
)
@click.pass_context
def compare(
    ctx: Any,
    root_dir: Path,
    host: Optional[str],
    port: Optional[str],
    user: Optional[str],
    key_file: Optional[Path],
    password: Optional[str],
    timeout: Optional[float],
    remote_root: str,
    diff_dir: Optional[Path],
) -> None:
    """Compare ROOT_DIR with the same tree on the remote server.

    Every file below ROOT_DIR is hashed locally and with sha1sum on the
    server. Exits with 0 when no differences are found and 2 when there
    are differences.
    """
    out: OutputFormatter = ctx.obj["out"]

    if not root_dir.is_dir():
        out.error(f"Invalid root directory - {root_dir}")
        ctx.exit(ExitStatus.SETUP_FAILURE)

    if diff_dir is not None and not diff_dir.is_dir():
        try:
            diff_dir.mkdir(parents=True)
        except OSError as e:
            out.error(f"Unable to create differences directory - {diff_dir} ({e})")
            ctx.exit(ExitStatus.SETUP_FAILURE)

    try:
        channel = build_channel(host, port, user, key_file, password, timeout)
        channel.connect()
    except SSHDiffError as e:
        out.error(str(e))
        ctx.exit(ExitStatus.SETUP_FAILURE)

    context = TraversalContext(
        local_root=root_dir,
        remote_root=remote_root.rstrip("/"),
        diff_dir=diff_dir,
        verbose=ctx.obj["verbose"],
    )

    try:
        status = CompareEngine(channel, out).run(context)
    except SSHDiffError as e:
        out.error(str(e))
        ctx.exit(ExitStatus.SETUP_FAILURE)
    except KeyboardInterrupt:
        out.warning("\nComparison cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    finally:
        channel.close()

    ctx.exit(int(status))


@main.command()
@click.argument("remote_path")
@connection_options
@click.pass_context
def probe(
    ctx: Any,
    remote_path: str,
    host: Optional[str],
    port: Optional[str],
    user: Optional[str],
    key_file: Optional[Path],
    password: Optional[str],
    timeout: Optional[float],
) -> None:
    """Hash a single REMOTE_PATH on the server and show how it classifies."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        with build_channel(host, port, user, key_file, password, timeout) as channel:
            result = RemoteHashOracle(channel).probe(remote_path)
    except SSHDiffError as e:
        out.error(str(e))
        ctx.exit(ExitStatus.SETUP_FAILURE)

    if out.json_output:
        out.output_json(
            {"path": remote_path, "status": result.status.value, "hash": result.hash}
        )
    elif result.status == ProbeStatus.HASH:
        out.summary(f"{result.hash}  {remote_path}")
    elif result.status == ProbeStatus.PERMISSION_DENIED:
        out.summary(f"Permission denied: {remote_path}")
    else:
        out.summary(f"Missing: {remote_path}")


@main.command()
@click.option("--host", "-s", prompt="SSH server address", help="SSH server")
@click.option(
    "--port",
    "-p",
    prompt="SSH port",
    default=str(DEFAULT_SSH_PORT),
    help="SSH port number",
)
@click.option(
    "--user",
    "-u",
    prompt="SSH user",
    default=lambda: config.username,
    help="User for SSH login",
)
@click.option(
    "--key-file",
    "-i",
    prompt="Private key file (empty for agent/default keys)",
    default="",
    help="Private key file",
)
@click.pass_context
def init(ctx: Any, host: str, port: str, user: str, key_file: str) -> None:
    """Save default connection settings.

    Stores them in ~/.config/sshdiff/config for future use.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        port_number = parse_port(port)
        if key_file and not Path(key_file).expanduser().is_file():
            raise SSHDiffConfigError(f"Unable to locate private key file - {key_file}")
        config.save(host, port=port_number, username=user, key_file=key_file or None)
    except (SSHDiffConfigError, OSError) as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(ExitStatus.SETUP_FAILURE)

    out.success(f"Saved connection defaults for {user}@{host}:{port_number}")
    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "Configuration saved successfully"),
            ("Config file", str(config.get_config_path())),
            ("Server", f"{user}@{host}:{port_number}"),
        ],
    )


if __name__ == "__main__":
    main()
