from __future__ import annotations

import pytest

from cronedit.crontab_parser import text_revision
from cronedit.errors import InstallError, RevisionConflictError
from cronedit.installer import CrontabInstaller
from cronedit.store import MemoryCrontabStore

from tests.conftest import SAMPLE_CRONTAB


class ReformattingStore(MemoryCrontabStore):
    """A store that normalizes what it is given, like some crontab implementations."""

    def replace(self, text: str) -> None:
        super().replace(text.replace("  ", " "))


def test_install_returns_fresh_read_not_written_text() -> None:
    store = ReformattingStore()
    installer = CrontabInstaller(store)

    confirmed = installer.install("0  3 * * * /bin/backup.sh\n")

    assert [e.raw_line for e in confirmed.entries] == ["0 3 * * * /bin/backup.sh"]
    assert confirmed.revision == text_revision(store.text)


def test_save_merges_and_installs() -> None:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    installer = CrontabInstaller(store)
    entries = installer.fetch().entries
    entries[0] = entries[0].model_copy(update={"enabled": False})

    confirmed = installer.save(entries)

    assert store.text.splitlines()[0] == "# 0 3 * * * /bin/backup.sh --full"
    assert [e.enabled for e in confirmed.entries] == [False, False, True]


def test_save_with_matching_revision() -> None:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    installer = CrontabInstaller(store)
    fetched = installer.fetch()

    installer.save(fetched.entries, fetched.revision)

    assert store.replace_calls == 1


def test_save_refuses_stale_revision() -> None:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    installer = CrontabInstaller(store)
    fetched = installer.fetch()
    store.text += "30 2 * * * /bin/added-elsewhere\n"

    with pytest.raises(RevisionConflictError):
        installer.save(fetched.entries, fetched.revision)

    assert store.replace_calls == 0
    assert "added-elsewhere" in store.text


def test_install_failure_leaves_store_unchanged() -> None:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    store.fail_replace = "errors in crontab file, can't install."
    installer = CrontabInstaller(store)

    with pytest.raises(InstallError) as exc:
        installer.save(installer.fetch().entries)

    assert "can't install" in exc.value.output
    assert store.text == SAMPLE_CRONTAB


def test_preview_does_not_write() -> None:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    installer = CrontabInstaller(store)

    merged = installer.preview([])

    assert store.replace_calls == 0
    assert len(merged.dropped) == 3
