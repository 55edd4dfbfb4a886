"""
Data models for the crontab editor.
"""

from typing import Dict, List, Optional, Tuple, Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LineKind(str, Enum):
    """Classification of a single crontab line."""
    ACTIVE_TASK = "active_task"
    DISABLED_TASK = "disabled_task"
    COMMENT = "comment"
    BLANK = "blank"
    ENVIRONMENT = "environment"
    UNRECOGNIZED = "unrecognized"


TASK_KINDS = (LineKind.ACTIVE_TASK, LineKind.DISABLED_TASK)

DISABLED_PREFIX = "# "


class CrontabEntry(BaseModel):
    """One scheduled job as exchanged with the web form."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: int = 0
    key: str = ""
    minute: str
    hour: str
    day_of_month: str = Field(alias="dayOfMonth")
    month: str
    day_of_week: str = Field(alias="dayOfWeek")
    command: str = ""
    raw_line: str = Field(default="", alias="rawLine")
    comment: str = ""
    enabled: bool = True

    @field_validator('minute', 'hour', 'day_of_month', 'month', 'day_of_week')
    @classmethod
    def schedule_field_is_token(cls, v):
        # Fields are whitespace-delimited on disk; anything else shifts the columns.
        if not v or len(v.split()) != 1 or v != v.strip():
            raise ValueError('Schedule field must be a single non-empty token')
        return v

    @field_validator('command', 'raw_line', 'comment')
    @classmethod
    def single_line(cls, v):
        if '\n' in v or '\r' in v:
            raise ValueError('Value must not contain line breaks')
        return v

    @property
    def schedule(self) -> Tuple[str, str, str, str, str]:
        return (self.minute, self.hour, self.day_of_month, self.month, self.day_of_week)

    @property
    def signature(self) -> Tuple[str, ...]:
        """Schedule fields plus command; the content an entry is identified by."""
        return self.schedule + (self.command,)

    def canonical_line(self) -> str:
        """Whitespace-joined six-field form rebuilt from the structured fields."""
        return " ".join(self.signature)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CrontabLine(BaseModel):
    """A crontab line tagged with its classification."""
    number: int
    kind: LineKind
    text: str
    entry: Optional[CrontabEntry] = None

    @property
    def is_task(self) -> bool:
        return self.kind in TASK_KINDS


class ParseResult(BaseModel):
    """Structured view of a crontab's text."""
    entries: List[CrontabEntry] = Field(default_factory=list)
    lines: List[CrontabLine] = Field(default_factory=list)
    # Lines that are neither tasks nor a known skip class; absent from entries
    skipped: List[str] = Field(default_factory=list)
    revision: str = ""

    def entries_json(self) -> List[Dict[str, Any]]:
        return [entry.to_json() for entry in self.entries]


class ReconcileResult(BaseModel):
    """Outcome of merging a submitted entry set into crontab text."""
    text: str
    claimed: List[str] = Field(default_factory=list)
    preserved: List[str] = Field(default_factory=list)
    dropped: List[str] = Field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.text.splitlines())
