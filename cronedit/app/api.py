"""
API blueprint for the crontab editor.

Endpoints:
- GET  /api/crontab          (entries as a JSON array; ETag carries the revision)
- POST /api/crontab          (full replacement set; returns the confirmed entries)
- POST /api/crontab/preview  (merged text without installing)
- GET  /api/crontab/raw      (raw text plus lines the entry view omits)
"""

from __future__ import annotations

from typing import Any, List, Optional

from flask import Blueprint, jsonify, make_response, request
from loguru import logger
from pydantic import ValidationError

from cronedit.errors import CrontabError, MalformedRequestError
from cronedit.installer import CrontabInstaller
from cronedit.models import CrontabEntry, ParseResult

api_bp = Blueprint("api", __name__)


def _installer() -> CrontabInstaller:
    return CrontabInstaller()


def _entries_response(parsed: ParseResult):
    resp = make_response(jsonify(parsed.entries_json()))
    resp.set_etag(parsed.revision)
    return resp


def _expected_revision() -> Optional[str]:
    # Only strong single-tag If-Match values are meaningful here
    if not request.if_match or request.if_match.star_tag:
        return None
    tags = request.if_match.as_set()
    return next(iter(tags)) if len(tags) == 1 else None


def _decode_entries() -> List[CrontabEntry]:
    payload: Any = request.get_json(silent=True)
    if not isinstance(payload, list):
        raise MalformedRequestError("Failed to parse request body: expected a JSON array of entries")
    entries: List[CrontabEntry] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedRequestError(f"Failed to parse request body: entry {index} is not an object")
        try:
            entries.append(CrontabEntry.model_validate(item))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise MalformedRequestError(f"Failed to parse request body: entry {index}: {problems}")
    return entries


@api_bp.errorhandler(CrontabError)
def handle_crontab_error(e: CrontabError):
    if e.status_code >= 500:
        logger.error(f"{type(e).__name__}: {e.message}")
    else:
        logger.info(f"Rejected request: {e.message}")
    return jsonify(e.to_dict()), e.status_code


@api_bp.get("/crontab")
def get_crontab():
    return _entries_response(_installer().fetch())


@api_bp.post("/crontab")
def update_crontab():
    entries = _decode_entries()
    confirmed = _installer().save(entries, _expected_revision())
    return _entries_response(confirmed)


@api_bp.post("/crontab/preview")
def preview_crontab():
    entries = _decode_entries()
    merged = _installer().preview(entries, _expected_revision())
    return jsonify(
        {
            "ok": True,
            "text": merged.text,
            "preserved": merged.preserved,
            "dropped": merged.dropped,
        }
    )


@api_bp.get("/crontab/raw")
def raw_crontab():
    installer = _installer()
    text = installer.store.read()
    parsed = installer.parser.parse(text)
    return jsonify({"ok": True, "text": text, "revision": parsed.revision, "skipped": parsed.skipped})
