"""Configuration management for sshdiff.

Connection defaults are read from environment variables and from a
``KEY=value`` file in the user's config directory, so that repeated
comparisons against the same server need no options on the command line.
"""

import getpass
import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import SSHDiffConfigError
from .utils import DEFAULT_SSH_PORT

logger = logging.getLogger(__name__)

ENV_HOST = "SSHDIFF_HOST"
ENV_PORT = "SSHDIFF_PORT"
ENV_USER = "SSHDIFF_USER"
ENV_KEY_FILE = "SSHDIFF_KEY_FILE"

_FILE_KEYS = (ENV_HOST, ENV_PORT, ENV_USER, ENV_KEY_FILE)


class Config:
    """Resolves connection settings from environment and config file."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                ~/.config/sshdiff/
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "sshdiff"
        self.config_dir = config_dir
        self.config_file = config_dir / "config"
        self._file_values: Optional[dict[str, str]] = None

    def _load_file(self) -> dict[str, str]:
        """Read KEY=value pairs from the config file (cached)."""
        if self._file_values is not None:
            return self._file_values

        values: dict[str, str] = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    for line in f:
                        line = line.strip()
                        if not line or line.startswith("#") or "=" not in line:
                            continue
                        key, value = line.split("=", 1)
                        values[key.strip()] = value.strip()
            except OSError as e:
                logger.warning(f"Failed to read config file {self.config_file}: {e}")

        self._file_values = values
        return values

    def _get(self, key: str) -> Optional[str]:
        value = os.environ.get(key)
        if value:
            return value
        return self._load_file().get(key) or None

    @property
    def host(self) -> Optional[str]:
        """Default SSH host."""
        return self._get(ENV_HOST)

    @property
    def port(self) -> int:
        """Default SSH port.

        Raises:
            SSHDiffConfigError: If the configured port is not a number
        """
        value = self._get(ENV_PORT)
        if value is None:
            return DEFAULT_SSH_PORT
        try:
            return int(value)
        except ValueError as e:
            raise SSHDiffConfigError(f"Invalid SSH port number - {value}") from e

    @property
    def username(self) -> str:
        """Default SSH user, falling back to the current shell user."""
        return self._get(ENV_USER) or getpass.getuser()

    @property
    def key_file(self) -> Optional[Path]:
        """Default private key file."""
        value = self._get(ENV_KEY_FILE)
        return Path(value).expanduser() if value else None

    def is_configured(self) -> bool:
        """Check whether a default host is available."""
        return self.host is not None

    def get_config_path(self) -> Path:
        """Get the path of the config file."""
        return self.config_file

    def save(
        self,
        host: str,
        port: int = DEFAULT_SSH_PORT,
        username: Optional[str] = None,
        key_file: Optional[str] = None,
    ) -> None:
        """Save connection defaults to the config file.

        Args:
            host: SSH host
            port: SSH port
            username: SSH user (omitted from the file if not given)
            key_file: Private key file (omitted from the file if not given)
        """
        values = {ENV_HOST: host, ENV_PORT: str(port)}
        if username:
            values[ENV_USER] = username
        if key_file:
            values[ENV_KEY_FILE] = key_file

        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            f.write("# sshdiff configuration\n")
            for key in _FILE_KEYS:
                if key in values:
                    f.write(f"{key}={values[key]}\n")
        self.config_file.chmod(0o600)
        self._file_values = None
        logger.debug(f"Saved configuration to {self.config_file}")


config = Config()
