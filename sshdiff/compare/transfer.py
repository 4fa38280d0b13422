"""Retrieval of differing remote files into a local mirror directory."""

import logging
from pathlib import Path

from ..channel import RemoteChannel
from ..exceptions import SSHDiffTransferError
from ..utils import join_relative

logger = logging.getLogger(__name__)


class TransferManager:
    """Copies remote files below a local mirror directory.

    A file at relative path ``/sub/b.txt`` is written to
    ``<diff_dir>/sub/b.txt``, replacing any earlier copy.
    """

    def __init__(self, channel: RemoteChannel, diff_dir: Path):
        """Initialize transfer manager.

        Args:
            channel: Remote channel used to copy files
            diff_dir: Local mirror directory
        """
        self.channel = channel
        self.diff_dir = diff_dir

    def target_path(self, relative_path: str) -> Path:
        """Local mirror path for a relative path."""
        return Path(join_relative(str(self.diff_dir), relative_path))

    def retrieve(self, remote_path: str, relative_path: str) -> Path:
        """Copy a remote file into the mirror directory.

        Args:
            remote_path: Absolute remote path of the file
            relative_path: Path of the file below the comparison root

        Returns:
            Local path the file was written to

        Raises:
            SSHDiffTransferError: If the mirror directory cannot be created
                or the copy fails
        """
        target = self.target_path(relative_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SSHDiffTransferError(
                f"Unable to create directory {target.parent}: {e}"
            ) from e

        self.channel.fetch(remote_path, target)
        logger.debug(f"Retrieved {remote_path} to {target}")
        return target
