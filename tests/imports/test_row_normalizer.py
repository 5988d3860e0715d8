from datetime import date, datetime, time

import pytest

from src.attendance_engine.attendance_engine.core.exceptions import ValidationError
from src.attendance_engine.attendance_engine.imports.normalizer import group_raw_punches, normalize_row


def test_normalize_accepts_source_column_aliases():
    row = normalize_row({"ZK_ID": " 42 ", "LOG_DATE": "2025-01-06", "TIME_IN": "8:00 AM", "TIME_OUT": "5:30 PM"})

    assert row.user_key == "42"
    assert row.work_date == date(2025, 1, 6)
    assert row.time_in == time(8, 0)
    assert row.time_out == time(17, 30)
    assert not row.is_reliever


def test_normalize_blank_time_out_means_open():
    row = normalize_row({"user_key": "7", "date": "2025-01-06", "time_in": "08:00", "time_out": "  ", "isReliever": "1"})

    assert row.time_out is None
    assert row.is_reliever


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"date": "2025-01-06", "time_in": "08:00"}, "user_key is required"),
        ({"user_key": "7", "time_in": "08:00"}, "date is required"),
        ({"user_key": "7", "date": "2025-01-06"}, "time_in is required"),
        ({"user_key": "7", "date": "2025-01-06", "time_in": "08:00", "time_out": "noon"}, "time_out"),
    ],
)
def test_normalize_rejects_incomplete_rows(raw, message):
    with pytest.raises(ValidationError, match=message):
        normalize_row(raw)


def test_group_raw_punches_pairs_first_and_last_of_day():
    grouped = group_raw_punches(
        [
            ("7", "2025-01-06T12:00:00"),
            ("7", "2025-01-06T08:01:00"),
            ("7", "2025-01-06T17:02:00"),
            ("8", datetime(2025, 1, 6, 9, 15)),
            {"zk_id": "7", "timestamp": "2025-01-07 08:00:00"},
            {"zk_id": "9", "ts": "garbage"},
        ]
    )

    assert grouped.rows == [
        {"user_key": "7", "date": "2025-01-06", "time_in": "08:01:00", "time_out": "17:02:00"},
        {"user_key": "7", "date": "2025-01-07", "time_in": "08:00:00", "time_out": None},
        {"user_key": "8", "date": "2025-01-06", "time_in": "09:15:00", "time_out": None},
    ]
    assert grouped.unreadable == [{"zk_id": "9", "ts": "garbage"}]


def test_grouped_rows_normalize_cleanly():
    grouped = group_raw_punches([("7", "2025-01-06T08:00:00"), ("7", "2025-01-06T17:00:00")])

    row = normalize_row(grouped.rows[0])
    assert (row.time_in, row.time_out) == (time(8, 0), time(17, 0))


def test_mixed_naive_and_offset_stamps_group_by_local_day():
    evening = datetime.fromisoformat("2025-01-06T17:00:00+08:00").astimezone().replace(tzinfo=None)

    grouped = group_raw_punches([("7", "2025-01-06T08:00:00"), ("7", "2025-01-06T17:00:00+08:00")])

    assert grouped.unreadable == []
    clocks = {(row["date"], clock) for row in grouped.rows for clock in (row["time_in"], row["time_out"])}
    assert (evening.date().isoformat(), evening.time().isoformat()) in clocks
    assert ("2025-01-06", "08:00:00") in clocks


def test_entries_that_are_not_pairs_are_reported_unreadable():
    grouped = group_raw_punches(
        [("7", "2025-01-06T08:00:00", "x"), ("7",), "7,2025-01-06T09:00:00", ("7", "2025-01-06T17:00:00")]
    )

    assert grouped.rows == [{"user_key": "7", "date": "2025-01-06", "time_in": "17:00:00", "time_out": None}]
    assert grouped.unreadable == [("7", "2025-01-06T08:00:00", "x"), ("7",), "7,2025-01-06T09:00:00"]
