"""Shared fixtures for sshdiff tests."""

import hashlib
from pathlib import Path
from typing import Optional

import pytest


class FakeChannel:
    """In-memory remote host answering sha1sum probes like a real shell.

    ``files`` maps absolute remote paths to their contents; paths in
    ``denied`` exist but cannot be read. ``raw`` forces the output text
    returned for a path.
    """

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.denied: set[str] = set()
        self.raw: dict[str, str] = {}
        self.commands: list[str] = []
        self.fetched: list[tuple[str, Path]] = []
        self.fetch_error: Optional[Exception] = None
        self.connected = False
        self.closed = False

    @staticmethod
    def path_from_command(command: str) -> str:
        prefix, suffix = 'sha1sum "', '" 2>&1'
        assert command.startswith(prefix) and command.endswith(suffix), command
        return command[len(prefix) : -len(suffix)].replace('\\"', '"')

    def run(self, command: str) -> str:
        self.commands.append(command)
        path = self.path_from_command(command)
        if path in self.raw:
            return self.raw[path]
        if path in self.denied:
            return f"sha1sum: {path}: Permission denied\n"
        if path in self.files:
            return f"{hashlib.sha1(self.files[path]).hexdigest()}  {path}\n"
        return f"sha1sum: {path}: No such file or directory\n"

    def fetch(self, remote_path: str, local_path: Path) -> None:
        if self.fetch_error is not None:
            raise self.fetch_error
        self.fetched.append((remote_path, local_path))
        local_path.write_bytes(self.files[remote_path])

    def connect(self) -> None:
        self.connected = True

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeChannel":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


@pytest.fixture
def fake_channel():
    """Provide an empty fake remote host."""
    return FakeChannel()


@pytest.fixture
def local_tree(tmp_path):
    """Create a small local tree: a.txt, sub/b.txt and sub/deeper/c.txt."""
    root = tmp_path / "local"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"alpha\n")
    (root / "sub" / "b.txt").write_bytes(b"bravo\n")
    (root / "sub" / "deeper" / "c.txt").write_bytes(b"charlie\n")
    return root


@pytest.fixture
def mirrored_channel(fake_channel, local_tree):
    """Fake remote host holding an identical copy of ``local_tree`` at ``/``."""
    for path in local_tree.rglob("*"):
        if path.is_file():
            relative = "/" + path.relative_to(local_tree).as_posix()
            fake_channel.files[relative] = path.read_bytes()
    return fake_channel
