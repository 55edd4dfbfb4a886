from __future__ import annotations

from cronedit.crontab_parser import classify_line, entry_key, parse_crontab, split_lines, text_revision
from cronedit.models import LineKind

from tests.conftest import SAMPLE_CRONTAB


def test_single_active_line_becomes_enabled_entry() -> None:
    result = parse_crontab("*/5 * * * * /usr/bin/foo\n")

    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.schedule == ("*/5", "*", "*", "*", "*")
    assert entry.command == "/usr/bin/foo"
    assert entry.enabled is True
    assert entry.raw_line == "*/5 * * * * /usr/bin/foo"


def test_disabled_task_keeps_prefixed_raw_line() -> None:
    result = parse_crontab("# 0 1 * * 0 /usr/bin/weekly  --quiet\n")

    entry = result.entries[0]
    assert entry.enabled is False
    assert entry.raw_line == "# 0 1 * * 0 /usr/bin/weekly  --quiet"
    assert entry.command == "/usr/bin/weekly  --quiet"


def test_sample_classification() -> None:
    result = parse_crontab(SAMPLE_CRONTAB)

    assert [line.kind for line in result.lines] == [
        LineKind.ENVIRONMENT,
        LineKind.ENVIRONMENT,
        LineKind.BLANK,
        LineKind.COMMENT,
        LineKind.ACTIVE_TASK,
        LineKind.DISABLED_TASK,
        LineKind.UNRECOGNIZED,
        LineKind.ACTIVE_TASK,
    ]
    assert [e.id for e in result.entries] == [1, 2, 3]
    assert result.entries[2].command == "cd /srv && ./rotate logs"


def test_unrecognized_lines_are_reported_not_parsed() -> None:
    result = parse_crontab(SAMPLE_CRONTAB)

    assert result.skipped == ["@reboot /usr/local/bin/start-agent"]
    assert all("@reboot" not in e.raw_line for e in result.entries)


def test_environment_rule_skips_lines_with_equals() -> None:
    kind, signature = classify_line("FOO=bar")
    assert kind == LineKind.ENVIRONMENT
    assert signature is None

    # A leading asterisk is never an assignment
    kind, _ = classify_line("* * * * * env X=1 /bin/run")
    assert kind == LineKind.ACTIVE_TASK


def test_comment_without_space_is_foreign() -> None:
    assert classify_line("#0 * * * * /bin/true")[0] == LineKind.COMMENT
    assert classify_line("# just a note")[0] == LineKind.COMMENT


def test_empty_text_yields_no_entries() -> None:
    result = parse_crontab("")

    assert result.entries == []
    assert result.lines == []
    assert result.revision == text_revision("")


def test_crlf_line_endings() -> None:
    assert split_lines("a\r\nb\r\n") == ["a", "b"]
    result = parse_crontab("0 0 * * * /bin/true\r\n")
    assert result.entries[0].raw_line == "0 0 * * * /bin/true"


def test_keys_are_stable_across_parses() -> None:
    first = parse_crontab(SAMPLE_CRONTAB)
    second = parse_crontab(SAMPLE_CRONTAB)

    assert [e.key for e in first.entries] == [e.key for e in second.entries]
    assert len({e.key for e in first.entries}) == 3


def test_duplicate_lines_get_distinct_keys() -> None:
    result = parse_crontab("0 0 * * * /bin/true\n0 0 * * * /bin/true\n")

    signature = ("0", "0", "*", "*", "*", "/bin/true")
    assert [e.key for e in result.entries] == [entry_key(signature, 0), entry_key(signature, 1)]


def test_key_ignores_enabled_state_and_spacing() -> None:
    active = parse_crontab("0  0 * * * /bin/true\n").entries[0]
    disabled = parse_crontab("# 0 0 * * * /bin/true\n").entries[0]

    assert active.key == disabled.key


def test_undecodable_bytes_are_never_entries() -> None:
    text = b"# caf\xe9\n0 1 * * * /opt/caf\xe9/run\nLANG=caf\xe9\n".decode("utf-8", errors="surrogateescape")

    result = parse_crontab(text)

    assert [line.kind for line in result.lines] == [
        LineKind.COMMENT,
        LineKind.UNRECOGNIZED,
        LineKind.ENVIRONMENT,
    ]
    assert result.entries == []
    assert result.lines[1].text.encode("utf-8", errors="surrogateescape") == b"0 1 * * * /opt/caf\xe9/run"
