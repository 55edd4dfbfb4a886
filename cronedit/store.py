"""
Backing stores for the crontab.

- CommandCrontabStore drives the `crontab` binary (`-l` to list, `<file>` to replace)
- MemoryCrontabStore keeps the table in memory for tests and local development
"""

from __future__ import annotations

import os
import subprocess
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from loguru import logger

from cronedit.config import StoreConfig, get_config
from cronedit.errors import (
    InstallError,
    StoreListError,
    StoreTimeoutError,
    StoreUnavailableError,
    TransientFileError,
)


class CrontabStore:
    """A crontab that can be read whole and replaced whole."""

    def read(self) -> str:
        """Current table text; empty string when the user has no crontab."""
        raise NotImplementedError

    def replace(self, text: str) -> None:
        """Atomically replace the whole table."""
        raise NotImplementedError


@contextmanager
def transient_crontab_file(text: str, directory: Optional[Path] = None) -> Iterator[str]:
    """
    Write text to a fresh temporary file and yield its path.

    The file is removed on every exit path.
    """
    path: Optional[str] = None
    try:
        try:
            fd, path = tempfile.mkstemp(prefix="crontab-editor-", dir=str(directory) if directory else None)
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="\n") as f:
                f.write(text)
        except OSError as e:
            raise TransientFileError(f"Failed to write temp file: {e}")
        yield path
    finally:
        if path:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove temp file {path}: {e}")


class CommandCrontabStore(CrontabStore):
    """Crontab backed by the system `crontab` command."""

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or get_config().store

    def _run(self, args: List[str], merge_output: bool) -> subprocess.CompletedProcess:
        cmd = self.config.base_command() + args
        t0 = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_output else subprocess.PIPE,
                check=False,
                timeout=self.config.timeout,
            )
        except FileNotFoundError:
            raise StoreUnavailableError(f"crontab binary '{self.config.crontab_binary}' not found on PATH")
        except subprocess.TimeoutExpired:
            raise StoreTimeoutError(f"`{' '.join(cmd)}` timed out after {self.config.timeout:.1f}s")
        elapsed_ms = int((time.monotonic() - t0) * 1000)
        logger.debug(f"{' '.join(cmd)} -> exit {proc.returncode} ({elapsed_ms}ms)")
        return proc

    def _is_empty_table(self, diagnostic: str) -> bool:
        lowered = diagnostic.lower()
        return any(marker.lower() in lowered for marker in self.config.empty_markers)

    def read(self) -> str:
        proc = self._run(["-l"], merge_output=False)
        stdout = (proc.stdout or b"").decode("utf-8", errors="surrogateescape")
        if proc.returncode == 0:
            return stdout

        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        if self._is_empty_table(stderr):
            logger.info("No crontab for this user; treating as empty")
            return ""
        diagnostic = "\n".join(part for part in (stdout.strip(), stderr.strip()) if part)
        logger.error(f"crontab -l failed (exit {proc.returncode}): {diagnostic}")
        raise StoreListError(f"Failed to list crontab (exit {proc.returncode})", output=diagnostic)

    def replace(self, text: str) -> None:
        with transient_crontab_file(text, self.config.temp_dir) as path:
            proc = self._run([path], merge_output=True)
            output = (proc.stdout or b"").decode("utf-8", errors="replace")
        if proc.returncode != 0:
            logger.error(f"Error updating crontab (exit {proc.returncode}): {output}\nCrontab content:\n{text}")
            raise InstallError(f"Failed to update crontab (exit {proc.returncode})", output=output)
        logger.info(f"Installed crontab ({len(text.splitlines())} lines)")


class MemoryCrontabStore(CrontabStore):
    """In-memory crontab; `fail_read` / `fail_replace` simulate store errors."""

    def __init__(self, text: str = ""):
        self.text = text
        self.fail_read: Optional[str] = None
        self.fail_replace: Optional[str] = None
        self.replace_calls = 0

    def read(self) -> str:
        if self.fail_read:
            raise StoreListError("Failed to list crontab", output=self.fail_read)
        return self.text

    def replace(self, text: str) -> None:
        self.replace_calls += 1
        if self.fail_replace:
            raise InstallError("Failed to update crontab", output=self.fail_replace)
        self.text = text


def create_store(config: Optional[StoreConfig] = None) -> CrontabStore:
    """Build the store selected by configuration."""
    config = config or get_config().store
    if config.backend == "memory":
        return MemoryCrontabStore()
    return CommandCrontabStore(config)


# Global store instance
_store: Optional[CrontabStore] = None


def get_store() -> CrontabStore:
    """Get the global store instance."""
    global _store
    if _store is None:
        _store = create_store()
    return _store


def set_store(store: CrontabStore) -> None:
    """Set the global store instance."""
    global _store
    _store = store


def reset_store() -> None:
    """Reset the global store instance."""
    global _store
    _store = None
