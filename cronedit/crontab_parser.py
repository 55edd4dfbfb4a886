"""
Crontab parser: turns `crontab -l` output into structured entries.
"""

import hashlib
import re
from typing import Dict, List, Optional, Tuple
from loguru import logger

from cronedit.models import (
    CrontabEntry,
    CrontabLine,
    DISABLED_PREFIX,
    LineKind,
    ParseResult,
)

# Five whitespace-delimited schedule fields, then the command (may contain spaces)
TASK_RE = re.compile(r'^(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(.*)$')

Signature = Tuple[str, str, str, str, str, str]

# Lone surrogates left by decoding `crontab -l` output with errors="surrogateescape"
_UNDECODABLE_RE = re.compile("[\udc80-\udcff]")


def split_lines(text: str) -> List[str]:
    """Split crontab text on newlines, dropping a trailing carriage return per line."""
    if not text:
        return []
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def match_task(text: str) -> Optional[Signature]:
    """Match the six-field task pattern; returns the fields with the command trimmed."""
    if _UNDECODABLE_RE.search(text):
        # Bytes that were not UTF-8 stay verbatim; they cannot be edited as an entry
        return None
    match = TASK_RE.match(text)
    if not match:
        return None
    groups = match.groups()
    return groups[:5] + (groups[5].strip(),)


def classify_line(line: str) -> Tuple[LineKind, Optional[Signature]]:
    """
    Classify one crontab line.

    Returns the line kind and, for task lines, the parsed signature
    (five schedule fields plus command).
    """
    if not line.strip():
        return LineKind.BLANK, None

    if '\r' in line:
        # Embedded carriage returns cannot round-trip through an entry
        return LineKind.UNRECOGNIZED, None

    if line.startswith(DISABLED_PREFIX):
        signature = match_task(line[len(DISABLED_PREFIX):])
        if signature:
            return LineKind.DISABLED_TASK, signature
        return LineKind.COMMENT, None

    if line.startswith('#'):
        return LineKind.COMMENT, None

    if '=' in line and not line.startswith('*'):
        return LineKind.ENVIRONMENT, None

    signature = match_task(line)
    if signature:
        return LineKind.ACTIVE_TASK, signature
    return LineKind.UNRECOGNIZED, None


def entry_key(signature: Tuple[str, ...], ordinal: int = 0) -> str:
    """
    Stable identity for a task line: digest of its fields and command plus the
    number of identical task lines that precede it.
    """
    digest = hashlib.sha1()
    digest.update('\x1f'.join(signature).encode('utf-8'))
    digest.update(f'\x1e{ordinal}'.encode('ascii'))
    return digest.hexdigest()[:16]


def text_revision(text: str) -> str:
    """Digest of the full crontab text, used as the ETag for optimistic saves."""
    return hashlib.sha256((text or '').encode('utf-8', errors='surrogateescape')).hexdigest()


class CrontabParser:
    """Parse raw crontab text into entries and a classified line model."""

    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse crontab text.

        Args:
            raw_text: Output of `crontab -l` (may be empty)

        Returns:
            ParseResult with entries in file order, every line classified,
            and the unrecognized lines that the entry list omits
        """
        result = ParseResult(revision=text_revision(raw_text))
        ordinals: Dict[Tuple[str, ...], int] = {}

        for number, line in enumerate(split_lines(raw_text), start=1):
            kind, signature = classify_line(line)
            entry = None

            if signature is not None:
                ordinal = ordinals.get(signature, 0)
                ordinals[signature] = ordinal + 1
                entry = CrontabEntry(
                    id=len(result.entries) + 1,
                    key=entry_key(signature, ordinal),
                    minute=signature[0],
                    hour=signature[1],
                    day_of_month=signature[2],
                    month=signature[3],
                    day_of_week=signature[4],
                    command=signature[5],
                    raw_line=line,
                    comment="",
                    enabled=kind == LineKind.ACTIVE_TASK,
                )
                result.entries.append(entry)
            elif kind == LineKind.UNRECOGNIZED:
                logger.warning(f"Non-standard crontab line skipped (line {number}): {line}")
                result.skipped.append(line)

            # model_construct: verbatim text may hold surrogate escapes, which str validation rejects
            result.lines.append(CrontabLine.model_construct(number=number, kind=kind, text=line, entry=entry))

        logger.debug(
            f"Parsed crontab: {len(result.lines)} lines, {len(result.entries)} entries, "
            f"{len(result.skipped)} skipped"
        )
        return result


# Global parser instance
_parser: Optional[CrontabParser] = None


def get_crontab_parser() -> CrontabParser:
    """Get the global crontab parser instance."""
    global _parser
    if _parser is None:
        _parser = CrontabParser()
    return _parser


def parse_crontab(raw_text: str) -> ParseResult:
    """Parse crontab text with the global parser."""
    return get_crontab_parser().parse(raw_text)
