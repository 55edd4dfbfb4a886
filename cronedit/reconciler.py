"""
Reconciler: merges a submitted entry set back into crontab text.

Submitted entries are written first, in submission order. The store's current
lines follow in their original order, except task lines, which are never
copied: every task line in the output comes from a submitted entry. Foreign
comments, environment assignments, blank lines and unrecognized text pass
through verbatim. An edited entry therefore replaces its old line simply
because the old line is not carried over.

Claiming only affects bookkeeping. A store task line counts as claimed when a
submitted entry carries its key (entries without a key get one derived from
their rawLine) or has the same rawLine; otherwise it counts as dropped. Both
kinds are left out of the text alike. A non-task line equal to a submitted
rawLine is also claimed and left out, so an entry's old text is never written
twice.
"""

from typing import Dict, List, Optional, Sequence, Set, Tuple
from loguru import logger

from cronedit.crontab_parser import CrontabParser, classify_line, entry_key, get_crontab_parser
from cronedit.models import CrontabEntry, DISABLED_PREFIX, ReconcileResult


def render_entry(entry: CrontabEntry) -> str:
    """Serialize one submitted entry as a crontab line."""
    canonical = entry.canonical_line()
    if entry.enabled:
        return canonical

    raw = entry.raw_line
    if not raw:
        return DISABLED_PREFIX + canonical

    _, signature = classify_line(raw)
    if signature is not None and tuple(signature) != entry.signature:
        # Edited while disabled: the original text no longer describes the entry
        return DISABLED_PREFIX + canonical
    if raw.startswith('#'):
        return raw
    return DISABLED_PREFIX + raw


def submitted_keys(entries: Sequence[CrontabEntry]) -> List[str]:
    """Identity key per submitted entry; empty for entries the store has never seen."""
    keys: List[str] = []
    ordinals: Dict[Tuple[str, ...], int] = {}
    for entry in entries:
        if entry.key:
            keys.append(entry.key)
            continue
        signature = classify_line(entry.raw_line)[1] if entry.raw_line else None
        if signature is None:
            keys.append("")
            continue
        ordinal = ordinals.get(signature, 0)
        ordinals[signature] = ordinal + 1
        keys.append(entry_key(signature, ordinal))
    return keys


class CrontabReconciler:
    """Merge submitted entries with the store's current text."""

    def __init__(self, parser: Optional[CrontabParser] = None):
        self.parser = parser or get_crontab_parser()

    def reconcile(self, submitted: Sequence[CrontabEntry], fresh_text: str) -> ReconcileResult:
        """
        Build the new crontab text.

        Args:
            submitted: The client's full entry set, in display order
            fresh_text: The store's text as read just before the merge

        Returns:
            ReconcileResult with the new text and per-line bookkeeping
        """
        fresh = self.parser.parse(fresh_text)
        claimed_keys: Set[str] = {key for key in submitted_keys(submitted) if key}
        claimed_raw: Set[str] = {entry.raw_line for entry in submitted if entry.raw_line}

        output = [render_entry(entry) for entry in submitted]
        result = ReconcileResult(text="")

        for line in fresh.lines:
            if line.is_task:
                if line.entry.key in claimed_keys or line.text in claimed_raw:
                    result.claimed.append(line.text)
                else:
                    result.dropped.append(line.text)
                continue
            if line.text in claimed_raw:
                result.claimed.append(line.text)
                continue
            result.preserved.append(line.text)

        output.extend(result.preserved)
        result.text = "".join(f"{line}\n" for line in output)

        logger.info(
            f"Reconciled crontab: {len(submitted)} submitted, {len(result.claimed)} claimed, "
            f"{len(result.preserved)} preserved, {len(result.dropped)} dropped"
        )
        for line in result.dropped:
            logger.debug(f"Dropping task line not in submission: {line}")
        return result


def reconcile(submitted: Sequence[CrontabEntry], fresh_text: str) -> ReconcileResult:
    """Reconcile with a reconciler bound to the global parser."""
    return CrontabReconciler().reconcile(submitted, fresh_text)
