# ruff: noqa: INP001
"""Text and JSON log formatting of structured `extra` fields."""

from __future__ import annotations

import json
import logging

from workorders.core.logging import JsonFormatter, KeyValueFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("workorders.test", logging.INFO, __file__, 1, "task.autoclose.completed", (), None)
    record.__dict__.update(extra)
    return record


def test_key_value_formatter_appends_sorted_extras() -> None:
    line = KeyValueFormatter("%(levelname)s %(message)s").format(_record(date="2024-01-01", changed_count=3))
    assert line == "INFO task.autoclose.completed changed_count=3 date=2024-01-01"


def test_json_formatter_emits_one_object_per_record() -> None:
    payload = json.loads(JsonFormatter(use_utc=True).format(_record(changed_count=3)))
    assert payload["message"] == "task.autoclose.completed"
    assert payload["level"] == "INFO"
    assert payload["changed_count"] == 3
    assert payload["ts"].endswith("+00:00")
