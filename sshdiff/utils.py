"""Utility functions for sshdiff."""

import hashlib
from pathlib import Path

# =============================================================================
# Constants
# =============================================================================

# Read size used when hashing local files (1 MB)
HASH_CHUNK_SIZE: int = 1024 * 1024

# Length of a hex encoded SHA-1 digest
SHA1_HEX_LENGTH: int = 40

DEFAULT_SSH_PORT: int = 22


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_sha1(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Calculate the SHA-1 content hash of a local file.

    The digest is returned in the same form ``sha1sum`` prints it, so it
    can be compared with remote output by plain string equality.

    Args:
        file_path: Path to the file
        chunk_size: Number of bytes read per iteration

    Returns:
        Lowercase 40 character hex digest

    Raises:
        OSError: If the file cannot be opened or read

    Examples:
        >>> import tempfile
        >>> with tempfile.NamedTemporaryFile() as f:
        ...     calculate_sha1(Path(f.name))
        'da39a3ee5e6b4b0d3255bfef95601890afd80709'
    """
    digest = hashlib.sha1()  # noqa: S324
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


# =============================================================================
# Remote path utilities
# =============================================================================


def escape_double_quotes(path: str) -> str:
    """Escape a path for use inside a double quoted shell argument.

    Only ``"`` is escaped. Other shell metacharacters (``$``, backticks,
    backslashes) are passed through unchanged.

    Examples:
        >>> escape_double_quotes('say "hi".txt')
        'say \\\\"hi\\\\".txt'
        >>> escape_double_quotes("plain.txt")
        'plain.txt'
    """
    return path.replace('"', '\\"')


def join_relative(base: str, relative_path: str) -> str:
    """Append a relative path (``/sub/file``) to a root by concatenation.

    Trailing slashes on ``base`` are dropped so the result never contains
    ``//``. An empty base yields the relative path itself.

    Examples:
        >>> join_relative("/srv/www/", "/index.php")
        '/srv/www/index.php'
        >>> join_relative("", "/index.php")
        '/index.php'
    """
    return base.rstrip("/") + relative_path


def pluralize(count: int, noun: str) -> str:
    """Format a count with a ``(s)`` suffixed noun, e.g. ``3 file(s)``."""
    return f"{count} {noun}(s)"


def remote_bytes(text: str) -> bytes:
    """Encode a command or path for the wire, keeping undecodable name bytes.

    File names that are not valid UTF-8 reach Python as lone surrogates
    (``surrogateescape``); they are turned back into their original bytes.

    Examples:
        >>> remote_bytes("/caf\\udce9.txt")
        b'/caf\\xe9.txt'
    """
    return text.encode("utf-8", "surrogateescape")


def printable(text: str) -> str:
    """Make text safe to print, showing undecodable name bytes as ``\\xNN``.

    Examples:
        >>> printable("/caf\\udce9.txt")
        '/caf\\\\xe9.txt'
        >>> printable("/café.txt")
        '/café.txt'
    """
    return remote_bytes(text).decode("utf-8", "backslashreplace")
