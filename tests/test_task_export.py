# tests/test_task_export.py

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from tasklist.tasks.task_export import (
    CSV_MIME_TYPE,
    classify_due,
    escape_field,
    export_file_name,
    format_date,
    generate_csv,
    write_csv,
)
from tasklist.tasks.task_models import DueBucket, Task, TaskStatus


def _task(**overrides) -> Task:
    base = dict(
        id="id-1",
        title="Buy milk",
        due=date(2024, 1, 10),
        tags=["home", "errand"],
        status=TaskStatus.TODO,
        created_at="2024-01-10T09:00:00.000Z",
        updated_at="2024-01-10T09:00:00.000Z",
    )
    base.update(overrides)
    return Task(**base)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("a,b", '"a,b"'),
        ('a"b', '"a""b"'),
        ("line1\nline2", '"line1\nline2"'),
        ("", ""),
        (None, ""),
        ("plain", "plain"),
        (42, "42"),
    ],
)
def test_escape_field(value, expected) -> None:
    assert escape_field(value) == expected


def test_generate_csv_header_rows_and_crlf() -> None:
    csv_text = generate_csv(
        [
            _task(),
            _task(id="id-2", title="Call, then write", due=None, tags=[], status=TaskStatus.DONE),
        ]
    )

    lines = csv_text.split("\r\n")
    assert lines == [
        "id,title,due,tags,status,created_at,updated_at",
        "id-1,Buy milk,2024-01-10,home;errand,todo,2024-01-10T09:00:00.000Z,2024-01-10T09:00:00.000Z",
        'id-2,"Call, then write",,,done,2024-01-10T09:00:00.000Z,2024-01-10T09:00:00.000Z',
    ]
    assert not csv_text.endswith("\r\n")
    assert csv_text.count("\r\n") == 2


def test_generate_csv_quotes_tag_containing_quote() -> None:
    csv_text = generate_csv([_task(tags=['say "hi"', "x"])])
    row = csv_text.split("\r\n")[1]
    assert '"say ""hi"";x"' in row


def test_generate_csv_empty_is_header_only() -> None:
    assert generate_csv([]) == "id,title,due,tags,status,created_at,updated_at"


def test_format_date_renders_local_wall_clock() -> None:
    dt = datetime(2024, 1, 10, 9, 30, tzinfo=timezone.utc)
    expected = dt.astimezone().strftime("%Y-%m-%d %H:%M")

    assert format_date(dt) == expected
    assert format_date("2024-01-10T09:30:00.000Z") == expected
    assert format_date(None) == ""
    assert format_date("") == ""


def test_export_file_name_and_mime() -> None:
    assert export_file_name(date(2024, 1, 10)) == "tasks-2024-01-10.csv"
    assert CSV_MIME_TYPE == "text/csv;charset=utf-8;"


def test_write_csv_keeps_crlf_and_utf8(tmp_path: Path) -> None:
    content = generate_csv([_task(title="牛乳を買う")])
    path = write_csv(tmp_path / "out" / "tasks.csv", content)

    raw = path.read_bytes()
    assert raw == content.encode("utf-8")
    assert b"\r\n" in raw


@pytest.mark.parametrize(
    ("due", "bucket"),
    [
        (None, DueBucket.NONE),
        (date(2024, 1, 9), DueBucket.OVERDUE),
        (date(2024, 1, 10), DueBucket.TODAY),
        (date(2024, 1, 11), DueBucket.FUTURE),
    ],
)
def test_classify_due(due, bucket) -> None:
    assert classify_due(due, date(2024, 1, 10)) == bucket
