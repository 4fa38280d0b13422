"""Entry point of the comparison core."""

import logging
from typing import Optional

from ..channel import RemoteChannel
from ..output import OutputFormatter
from .oracle import RemoteHashOracle
from .report import ExitStatus, Reporter, RunTally
from .transfer import TransferManager
from .walker import TraversalContext, TreeWalker

logger = logging.getLogger(__name__)


class CompareEngine:
    """Compares a local directory tree with its mirror on a remote host."""

    def __init__(
        self,
        channel: RemoteChannel,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize compare engine.

        Args:
            channel: Connected remote channel
            output: Output formatter for per file lines and the summary
        """
        self.channel = channel
        self.output = output or OutputFormatter()
        self.oracle = RemoteHashOracle(channel)

    def compare(
        self, context: TraversalContext, reporter: Optional[Reporter] = None
    ) -> RunTally:
        """Walk the whole local tree and return the final tally.

        Args:
            context: Traversal settings
            reporter: Receives per file results (a new one if not provided)

        Returns:
            RunTally for the run

        Raises:
            ValueError: If the local root is missing or not a directory

        Examples:
            >>> engine = CompareEngine(channel)
            >>> tally = engine.compare(TraversalContext(Path("/srv/www")))
            >>> print(tally.differences)
        """
        if not context.local_root.exists():
            raise ValueError(f"Local directory does not exist: {context.local_root}")
        if not context.local_root.is_dir():
            raise ValueError(f"Local path is not a directory: {context.local_root}")

        transfer = None
        if context.diff_dir is not None:
            transfer = TransferManager(self.channel, context.diff_dir)

        if reporter is None:
            reporter = Reporter(self.output, verbose=context.verbose)
        walker = TreeWalker(self.oracle, reporter, transfer)

        logger.debug(
            f"Comparing {context.local_root} with remote "
            f"{context.remote_root or '/'}"
        )
        tally = walker.walk(context)
        logger.debug(
            f"Finished: {tally.differences} difference(s), "
            f"{tally.permission_issues} permission issue(s)"
        )
        return tally

    def run(self, context: TraversalContext) -> ExitStatus:
        """Compare, print the summary and return the exit status."""
        reporter = Reporter(self.output, verbose=context.verbose)
        tally = self.compare(context, reporter)
        return reporter.finish(tally)
