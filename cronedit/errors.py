"""
Error types raised by the crontab store, installer and API layers.
"""

from __future__ import annotations

from typing import Optional


class CrontabError(Exception):
    """Base error; carries captured process output when there is any."""

    status_code = 500

    def __init__(self, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.output = output or ""

    def to_dict(self) -> dict:
        data = {"ok": False, "error": self.message}
        if self.output:
            data["output"] = self.output
        return data


class StoreListError(CrontabError):
    """Listing the crontab failed for a reason other than an empty table."""


class InstallError(CrontabError):
    """The crontab binary refused to install the new table."""


class TransientFileError(CrontabError):
    """The temporary file handed to the installer could not be written."""


class StoreTimeoutError(CrontabError):
    status_code = 504


class StoreUnavailableError(CrontabError):
    status_code = 503


class MalformedRequestError(CrontabError):
    status_code = 400


class RevisionConflictError(CrontabError):
    """The crontab changed since the client fetched it."""

    status_code = 412
