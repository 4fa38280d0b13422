"""Tallying and reporting of comparison results."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..output import OutputFormatter
from ..utils import pluralize, printable
from .comparator import DiffOutcome

_OUTCOME_LABELS = {
    DiffOutcome.MISMATCH: "Difference",
    DiffOutcome.MISSING: "Missing",
    DiffOutcome.PERMISSION_ISSUE: "Permission denied",
}


class ExitStatus(IntEnum):
    """Process exit status of a comparison run."""

    CLEAN = 0
    SETUP_FAILURE = 1
    DIFFERENCES_FOUND = 2


@dataclass
class RunTally:
    """Counts accumulated over a traversal.

    Counters only ever grow. Tallies from separate subtrees are combined
    with ``+``.
    """

    differences: int = 0
    """Mismatched plus missing files"""

    permission_issues: int = 0
    """Files whose content could not be checked"""

    def record(self, outcome: DiffOutcome) -> None:
        """Count a single file outcome."""
        if outcome.is_difference:
            self.differences += 1
        elif outcome == DiffOutcome.PERMISSION_ISSUE:
            self.permission_issues += 1

    def __add__(self, other: "RunTally") -> "RunTally":
        return RunTally(
            differences=self.differences + other.differences,
            permission_issues=self.permission_issues + other.permission_issues,
        )

    @property
    def exit_status(self) -> ExitStatus:
        """Exit status implied by the counts; permission issues alone are clean."""
        if self.differences > 0:
            return ExitStatus.DIFFERENCES_FOUND
        return ExitStatus.CLEAN


def summary_text(tally: RunTally) -> str:
    """Render the one line summary of a run.

    Examples:
        >>> summary_text(RunTally())
        'All done - no differences'
        >>> summary_text(RunTally(differences=2, permission_issues=1))
        'All done - 2 difference(s) found, unable to check 1 file(s) due to permissions'
    """
    if tally.differences > 0:
        text = f"All done - {pluralize(tally.differences, 'difference')} found"
    else:
        text = "All done - no differences"
    if tally.permission_issues > 0:
        text += (
            f", unable to check {pluralize(tally.permission_issues, 'file')}"
            " due to permissions"
        )
    return text


def summary_lines(tally: RunTally) -> list[str]:
    """Summary block: a blank line, an ``=`` rule as wide as the text, the text."""
    text = summary_text(tally)
    return ["", "=" * len(text), text]


class Reporter:
    """Writes per file progress lines and the final summary.

    In JSON mode nothing is written until ``finish``, which emits one
    document listing every reportable file.
    """

    def __init__(self, out: OutputFormatter, verbose: bool = False):
        """Initialize reporter.

        Args:
            out: Output formatter
            verbose: Also report files being checked and transfers
        """
        self.out = out
        self.verbose = verbose
        self.files: list[dict[str, Optional[str]]] = []

    def checking(self, relative_path: str, local_hash: str) -> None:
        if self.verbose:
            self.out.info(f"Checking: {printable(relative_path)} [{local_hash}]")

    def outcome(self, relative_path: str, outcome: DiffOutcome) -> None:
        """Report a file outcome. Matches are not reported."""
        if outcome == DiffOutcome.MATCH:
            return
        path = printable(relative_path)
        self.files.append(
            {"path": path, "outcome": outcome.value, "transferred_to": None}
        )
        self.out.info(f"{_OUTCOME_LABELS[outcome]}: {path}")

    def transferred(self, remote_path: str, local_path: str) -> None:
        local_path = printable(local_path)
        if self.files:
            self.files[-1]["transferred_to"] = local_path
        if self.verbose:
            self.out.info(f"Transferred: {printable(remote_path)} => {local_path}")

    def transfer_failed(self, relative_path: str, reason: str) -> None:
        self.out.warning(
            f"Transfer failed: {printable(relative_path)} ({printable(reason)})"
        )

    def finish(self, tally: RunTally) -> ExitStatus:
        """Write the summary for a completed run and return its exit status."""
        status = tally.exit_status
        if self.out.json_output:
            self.out.output_json(
                {
                    "differences": tally.differences,
                    "permission_issues": tally.permission_issues,
                    "status": "differences_found"
                    if status == ExitStatus.DIFFERENCES_FOUND
                    else "clean",
                    "files": self.files,
                }
            )
        else:
            for line in summary_lines(tally):
                self.out.summary(line)
        return status
