"""Exceptions raised by sshdiff."""


class SSHDiffError(Exception):
    """Base exception for all sshdiff errors."""


class SSHDiffConfigError(SSHDiffError):
    """Raised when required configuration is missing or invalid."""


class SSHDiffConnectionError(SSHDiffError):
    """Raised when the SSH connection cannot be established or is lost."""


class SSHDiffAuthenticationError(SSHDiffConnectionError):
    """Raised when the SSH server rejects the supplied credentials."""


class SSHDiffCommandError(SSHDiffError):
    """Raised when a remote command cannot be executed on the channel."""


class SSHDiffTransferError(SSHDiffError):
    """Raised when a remote file cannot be retrieved."""
