"""sshdiff - compare a local directory tree with its copy on an SSH server."""

__version__ = "0.1.0"

from .channel import RemoteChannel, SSHChannel  # noqa: E402
from .exceptions import (  # noqa: E402
    SSHDiffAuthenticationError,
    SSHDiffCommandError,
    SSHDiffConfigError,
    SSHDiffConnectionError,
    SSHDiffError,
    SSHDiffTransferError,
)

__all__ = [
    "RemoteChannel",
    "SSHChannel",
    "SSHDiffAuthenticationError",
    "SSHDiffCommandError",
    "SSHDiffConfigError",
    "SSHDiffConnectionError",
    "SSHDiffError",
    "SSHDiffTransferError",
    "__version__",
]
