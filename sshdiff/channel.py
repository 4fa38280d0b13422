"""Remote command channel over SSH.

The comparison core only needs two capabilities from the remote side:
running a shell command and collecting its output, and copying a file
back. ``RemoteChannel`` describes them; ``SSHChannel`` implements them
with paramiko.
"""

from __future__ import annotations

import logging
import socket
from pathlib import Path
from typing import Protocol

import paramiko

from .exceptions import (
    SSHDiffAuthenticationError,
    SSHDiffCommandError,
    SSHDiffConnectionError,
    SSHDiffTransferError,
)
from .utils import DEFAULT_SSH_PORT, printable, remote_bytes

logger = logging.getLogger(__name__)


class RemoteChannel(Protocol):
    """A serial request/response channel to the remote host."""

    def run(self, command: str) -> str:
        """Run a shell command and return its combined stdout/stderr text."""
        ...

    def fetch(self, remote_path: str, local_path: Path) -> None:
        """Copy a remote file's bytes to a local path."""
        ...


class SSHChannel:
    """paramiko backed remote channel.

    One SSH connection is opened and reused for every command. Commands are
    strictly sequential: each call blocks until the remote command has
    closed its output stream.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_SSH_PORT,
        username: str | None = None,
        key_file: Path | None = None,
        password: str | None = None,
        connect_timeout: float = 30.0,
        command_timeout: float | None = None,
    ):
        """Initialize SSH channel.

        Args:
            host: SSH server address
            port: SSH port (default: 22)
            username: Login user (paramiko default if not provided)
            key_file: Private key file; agent and default keys are used if
                not provided
            password: Optional password or key passphrase
            connect_timeout: TCP connect timeout in seconds (default: 30.0)
            command_timeout: Maximum seconds to wait for remote output,
                None waits forever
        """
        self.host = host
        self.port = port
        self.username = username
        self.key_file = key_file
        self.password = password
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

        self._client: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    @property
    def address(self) -> str:
        """Server address as ``host:port``."""
        return f"{self.host}:{self.port}"

    def connect(self) -> None:
        """Open the SSH connection and authenticate.

        Raises:
            SSHDiffAuthenticationError: If the server rejects the credentials
            SSHDiffConnectionError: If the server cannot be reached
        """
        if self._client is not None:
            return

        logger.debug(f"Connecting to {self.username or ''}@{self.address}")
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            client.connect(
                self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                key_filename=str(self.key_file) if self.key_file else None,
                look_for_keys=self.key_file is None,
                timeout=self.connect_timeout,
            )
        except paramiko.AuthenticationException as e:
            client.close()
            raise SSHDiffAuthenticationError(
                "Unable to authenticate using given username/key file"
            ) from e
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise SSHDiffConnectionError(
                f"Unable to connect to target server - {self.address}: {e}"
            ) from e

        self._client = client

    def _require_client(self) -> paramiko.SSHClient:
        if self._client is None:
            raise SSHDiffConnectionError("SSH channel is not connected")
        return self._client

    def _get_transport(self) -> paramiko.Transport:
        transport = self._require_client().get_transport()
        if transport is None or not transport.is_active():
            raise SSHDiffConnectionError(f"SSH connection to {self.address} lost")
        return transport

    def run(self, command: str) -> str:
        """Run a command and return everything it wrote.

        stderr is merged into stdout on the SSH channel itself, so output
        is returned in the order the remote side produced it.

        Args:
            command: Shell command line

        Returns:
            Decoded output text (invalid UTF-8 is replaced)

        Raises:
            SSHDiffConnectionError: If the connection is not usable
            SSHDiffCommandError: If the command cannot be run or times out
        """
        transport = self._get_transport()
        logger.debug(f"Running remote command: {printable(command)}")

        try:
            session = transport.open_session()
        except paramiko.SSHException as e:
            raise SSHDiffCommandError(f"Unable to open SSH session: {e}") from e

        try:
            session.set_combined_stderr(True)
            session.settimeout(self.command_timeout)
            session.exec_command(remote_bytes(command))
            with session.makefile("rb") as stream:
                data = stream.read()
        except socket.timeout as e:
            raise SSHDiffCommandError(
                f"Remote command timed out after {self.command_timeout}s: "
                f"{printable(command)}"
            ) from e
        except (paramiko.SSHException, OSError, UnicodeError) as e:
            raise SSHDiffCommandError(f"Remote command failed: {e}") from e
        finally:
            session.close()

        return data.decode("utf-8", errors="replace")

    def _get_sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            self._get_transport()
            self._sftp = self._require_client().open_sftp()
        return self._sftp

    def fetch(self, remote_path: str, local_path: Path) -> None:
        """Copy a remote file to a local path, overwriting it.

        Args:
            remote_path: Absolute remote file path
            local_path: Destination path (parent directory must exist)

        Raises:
            SSHDiffTransferError: If the file cannot be copied
        """
        try:
            self._get_sftp().get(remote_bytes(remote_path), str(local_path))
        except (paramiko.SSHException, OSError, UnicodeError) as e:
            raise SSHDiffTransferError(
                f"Unable to retrieve {printable(remote_path)}: {e}"
            ) from e

    def close(self) -> None:
        """Close the SFTP session and the SSH connection."""
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._client is not None:
            logger.debug(f"Closing connection to {self.address}")
            self._client.close()
            self._client = None

    def __enter__(self) -> SSHChannel:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
