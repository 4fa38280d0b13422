"""Remote content hashing over a command channel.

The remote side offers no hashing API, so each file is hashed by running
``sha1sum`` through the shell and interpreting whatever text comes back.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..channel import RemoteChannel
from ..utils import escape_double_quotes

logger = logging.getLogger(__name__)

PROBE_COMMAND_TEMPLATE = 'sha1sum "{path}" 2>&1'

PERMISSION_DENIED_SUFFIX = ": Permission denied"

# sha1sum prints "<digest>  <path>"
_HASH_LINE_RE = re.compile(r"^([0-9a-f]{40})  ")


class ProbeStatus(str, Enum):
    """Classification of a remote probe."""

    HASH = "hash"
    """Remote file was hashed"""

    NOT_FOUND = "not_found"
    """Remote file missing, or any output that could not be recognised"""

    PERMISSION_DENIED = "permission_denied"
    """Remote file exists but could not be read"""


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing one remote file."""

    status: ProbeStatus
    hash: Optional[str] = None

    @classmethod
    def found(cls, digest: str) -> "ProbeResult":
        return cls(ProbeStatus.HASH, digest)

    @classmethod
    def not_found(cls) -> "ProbeResult":
        return cls(ProbeStatus.NOT_FOUND)

    @classmethod
    def permission_denied(cls) -> "ProbeResult":
        return cls(ProbeStatus.PERMISSION_DENIED)


def build_probe_command(remote_path: str) -> str:
    """Build the shell command that hashes ``remote_path``.

    Examples:
        >>> build_probe_command("/var/www/index.php")
        'sha1sum "/var/www/index.php" 2>&1'
    """
    return PROBE_COMMAND_TEMPLATE.format(path=escape_double_quotes(remote_path))


def parse_probe_output(output: str) -> ProbeResult:
    """Classify raw ``sha1sum`` output.

    Rules are applied in order: a leading 40 digit lowercase hex digest
    followed by two spaces is a hash; output ending in
    ``": Permission denied"`` (trailing line breaks ignored) is a permission
    failure; anything else counts as not found.

    Examples:
        >>> parse_probe_output("sha1sum: /x: No such file or directory\\n").status
        <ProbeStatus.NOT_FOUND: 'not_found'>
    """
    match = _HASH_LINE_RE.match(output)
    if match:
        return ProbeResult.found(match.group(1))

    if output.rstrip("\r\n").endswith(PERMISSION_DENIED_SUFFIX):
        return ProbeResult.permission_denied()

    return ProbeResult.not_found()


class RemoteHashOracle:
    """Hashes remote files, one remote command per file."""

    def __init__(self, channel: RemoteChannel):
        """Initialize oracle.

        Args:
            channel: Remote command channel
        """
        self.channel = channel

    def probe(self, remote_path: str) -> ProbeResult:
        """Hash a remote file.

        Args:
            remote_path: Absolute remote path of the file

        Returns:
            ProbeResult for the file

        Raises:
            SSHDiffCommandError: If the channel cannot run the command
        """
        output = self.channel.run(build_probe_command(remote_path))
        result = parse_probe_output(output)
        if result.status != ProbeStatus.HASH:
            logger.debug(f"Probe of {remote_path} returned {output!r}")
        return result
