"""Depth-first traversal of the local tree against its remote mirror."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import SSHDiffTransferError
from ..utils import calculate_sha1, join_relative, printable
from .comparator import DiffOutcome, LocalFile, classify
from .oracle import RemoteHashOracle
from .report import Reporter, RunTally
from .transfer import TransferManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraversalContext:
    """Settings shared by every level of one traversal."""

    local_root: Path
    """Local directory being compared"""

    remote_root: str = ""
    """Remote directory mirroring ``local_root``; empty means ``/``"""

    diff_dir: Optional[Path] = None
    """Where differing remote files are copied, None disables retrieval"""

    verbose: bool = False

    def local_path(self, relative_path: str) -> Path:
        return self.local_root / relative_path.lstrip("/")

    def remote_path(self, relative_path: str) -> str:
        return join_relative(self.remote_root, relative_path)


class TreeWalker:
    """Walks a local tree and checks every regular file against the remote.

    Directory entries are visited in the order the filesystem returns them.
    Each subdirectory is finished before the next sibling entry is looked
    at. Directories are only recursed into, never classified.
    """

    def __init__(
        self,
        oracle: RemoteHashOracle,
        reporter: Reporter,
        transfer: Optional[TransferManager] = None,
    ):
        """Initialize tree walker.

        Args:
            oracle: Remote hash oracle
            reporter: Receives per file results
            transfer: Retrieves mismatched files, None to disable
        """
        self.oracle = oracle
        self.reporter = reporter
        self.transfer = transfer

    def walk(self, context: TraversalContext, relative_dir: str = "") -> RunTally:
        """Compare everything below ``relative_dir``.

        A local directory that cannot be opened is skipped without being
        counted.

        Args:
            context: Traversal settings
            relative_dir: Directory below the root, "" for the root itself

        Returns:
            Tally for the directory and all of its subdirectories
        """
        tally = RunTally()
        directory = context.local_path(relative_dir)

        try:
            entries = os.scandir(directory)
        except OSError as e:
            logger.debug(
                f"Skipping unreadable directory {printable(str(directory))}: {e}"
            )
            return tally

        with entries:
            for entry in entries:
                if entry.name in (".", ".."):
                    continue

                relative_path = f"{relative_dir}/{entry.name}"
                if entry.is_dir():
                    tally += self.walk(context, relative_path)
                elif entry.is_file():
                    tally.record(
                        self._check_file(context, Path(entry.path), relative_path)
                    )

        return tally

    def _check_file(
        self, context: TraversalContext, path: Path, relative_path: str
    ) -> DiffOutcome:
        try:
            local_file = LocalFile(path, relative_path, calculate_sha1(path))
        except OSError as e:
            logger.debug(f"Unable to hash local file {printable(str(path))}: {e}")
            self.reporter.outcome(relative_path, DiffOutcome.PERMISSION_ISSUE)
            return DiffOutcome.PERMISSION_ISSUE

        self.reporter.checking(relative_path, local_file.sha1)

        remote_path = context.remote_path(relative_path)
        outcome = classify(local_file.sha1, self.oracle.probe(remote_path))
        self.reporter.outcome(relative_path, outcome)

        if outcome == DiffOutcome.MISMATCH and self.transfer is not None:
            self._retrieve(remote_path, relative_path)

        return outcome

    def _retrieve(self, remote_path: str, relative_path: str) -> None:
        try:
            target = self.transfer.retrieve(remote_path, relative_path)
        except SSHDiffTransferError as e:
            logger.warning(f"Transfer of {printable(remote_path)} failed: {e}")
            self.reporter.transfer_failed(relative_path, str(e))
            return
        self.reporter.transferred(remote_path, str(target))
