"""
cronedit - edit a user's crontab through a JSON API.
"""

from cronedit.models import CrontabEntry, CrontabLine, LineKind, ParseResult, ReconcileResult
from cronedit.config import get_config, set_config, reset_config
from cronedit.crontab_parser import get_crontab_parser, parse_crontab
from cronedit.reconciler import reconcile

__version__ = "1.0.0"
__all__ = [
    "CrontabEntry",
    "CrontabLine",
    "LineKind",
    "ParseResult",
    "ReconcileResult",
    "get_config",
    "set_config",
    "reset_config",
    "get_crontab_parser",
    "parse_crontab",
    "reconcile",
]
