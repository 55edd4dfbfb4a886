from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cronedit.app import create_app
from cronedit.config import AppConfig, reset_config, set_config
from cronedit.store import MemoryCrontabStore, reset_store, set_store

if TYPE_CHECKING:
    from collections.abc import Iterator

    from flask import Flask
    from flask.testing import FlaskClient


SAMPLE_CRONTAB = (
    "SHELL=/bin/bash\n"
    "MAILTO=ops@example.com\n"
    "\n"
    "# nightly jobs\n"
    "0 3 * * * /bin/backup.sh --full\n"
    "# */5 * * * * /usr/bin/foo\n"
    "@reboot /usr/local/bin/start-agent\n"
    "15 4 * * 1-5 cd /srv && ./rotate logs\n"
)


@pytest.fixture
def app_config() -> Iterator[AppConfig]:
    cfg = AppConfig()
    cfg.store.backend = "memory"
    set_config(cfg)
    try:
        yield cfg
    finally:
        reset_config()


@pytest.fixture
def memory_store() -> Iterator[MemoryCrontabStore]:
    store = MemoryCrontabStore(SAMPLE_CRONTAB)
    set_store(store)
    try:
        yield store
    finally:
        reset_store()


@pytest.fixture
def app(app_config: AppConfig, memory_store: MemoryCrontabStore) -> Flask:
    flask_app = create_app(app_config)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()
