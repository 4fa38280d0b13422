"""Recursive local/remote tree comparison."""

from .comparator import DiffOutcome, LocalFile, classify
from .engine import CompareEngine
from .oracle import (
    ProbeResult,
    ProbeStatus,
    RemoteHashOracle,
    build_probe_command,
    parse_probe_output,
)
from .report import ExitStatus, Reporter, RunTally, summary_lines, summary_text
from .transfer import TransferManager
from .walker import TraversalContext, TreeWalker

__all__ = [
    "CompareEngine",
    "DiffOutcome",
    "ExitStatus",
    "LocalFile",
    "ProbeResult",
    "ProbeStatus",
    "RemoteHashOracle",
    "Reporter",
    "RunTally",
    "TransferManager",
    "TraversalContext",
    "TreeWalker",
    "build_probe_command",
    "classify",
    "parse_probe_output",
    "summary_lines",
    "summary_text",
]
