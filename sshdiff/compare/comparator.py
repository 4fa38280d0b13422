"""Classification of local files against remote probe results."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .oracle import ProbeResult, ProbeStatus


class DiffOutcome(str, Enum):
    """Outcome of comparing one local file with its remote counterpart."""

    MATCH = "match"
    """Remote hash equals local hash"""

    MISMATCH = "mismatch"
    """Remote file exists with different content"""

    MISSING = "missing"
    """Remote file not found"""

    PERMISSION_ISSUE = "permission_issue"
    """File could not be read, content unknown"""

    @property
    def is_difference(self) -> bool:
        """Whether this outcome counts as a content difference."""
        return self in (DiffOutcome.MISMATCH, DiffOutcome.MISSING)


@dataclass(frozen=True)
class LocalFile:
    """A regular file found while walking the local tree."""

    path: Path
    """Absolute local path"""

    relative_path: str
    """Path below the comparison root, always starting with ``/``"""

    sha1: str
    """Lowercase hex SHA-1 of the file contents"""


def classify(local_hash: str, probe: ProbeResult) -> DiffOutcome:
    """Derive the outcome for a file from its local hash and remote probe.

    Hashes are compared as exact, case sensitive strings.

    Args:
        local_hash: Local content hash
        probe: Remote probe result

    Returns:
        DiffOutcome for the file
    """
    if probe.status == ProbeStatus.PERMISSION_DENIED:
        return DiffOutcome.PERMISSION_ISSUE
    if probe.status == ProbeStatus.NOT_FOUND:
        return DiffOutcome.MISSING
    if probe.hash == local_hash:
        return DiffOutcome.MATCH
    return DiffOutcome.MISMATCH
