"""
Installs reconciled crontab text and reads back the confirmed state.
"""

from typing import Optional, Sequence
from loguru import logger

from cronedit.crontab_parser import CrontabParser, get_crontab_parser, text_revision
from cronedit.errors import RevisionConflictError
from cronedit.models import CrontabEntry, ParseResult, ReconcileResult
from cronedit.reconciler import CrontabReconciler
from cronedit.store import CrontabStore, get_store


class CrontabInstaller:
    """Fetch, merge and install a crontab through a backing store."""

    def __init__(
        self,
        store: Optional[CrontabStore] = None,
        parser: Optional[CrontabParser] = None,
        reconciler: Optional[CrontabReconciler] = None,
    ):
        self.store = store or get_store()
        self.parser = parser or get_crontab_parser()
        self.reconciler = reconciler or CrontabReconciler(self.parser)

    def fetch(self) -> ParseResult:
        """Read and parse the current crontab."""
        return self.parser.parse(self.store.read())

    def preview(
        self,
        entries: Sequence[CrontabEntry],
        expected_revision: Optional[str] = None,
    ) -> ReconcileResult:
        """
        Merge entries with a fresh read of the store without writing anything.

        Raises RevisionConflictError when expected_revision is given and the
        store no longer matches it.
        """
        fresh_text = self.store.read()
        if expected_revision and expected_revision != text_revision(fresh_text):
            logger.warning("Crontab changed since it was fetched; refusing to merge")
            raise RevisionConflictError("Crontab was modified since it was loaded; reload and try again")
        return self.reconciler.reconcile(entries, fresh_text)

    def install(self, new_text: str) -> ParseResult:
        """
        Replace the crontab and return the store's own view of the result.

        The written text is never echoed back: the store may reformat or
        reject lines, so the confirmation is a fresh read.
        """
        self.store.replace(new_text)
        confirmed = self.fetch()
        logger.info(f"Crontab installed: {len(confirmed.entries)} entries confirmed")
        return confirmed

    def save(
        self,
        entries: Sequence[CrontabEntry],
        expected_revision: Optional[str] = None,
    ) -> ParseResult:
        """Reconcile entries against the current crontab and install the result."""
        merged = self.preview(entries, expected_revision)
        return self.install(merged.text)
