from datetime import datetime, timezone

import pytest

from clinic_api.errors import InvalidInput
from clinic_api.time_utils import normalize_date, normalize_timestamp, now_iso, to_iso


def test_to_iso_uses_millisecond_utc_form():
    dt = datetime(2024, 3, 1, 10, 5, 7, 123456, tzinfo=timezone.utc)
    assert to_iso(dt) == "2024-03-01T10:05:07.123Z"


def test_now_iso_shape():
    value = now_iso()
    assert len(value) == 24 and value.endswith("Z")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-03-01T10:00:00Z", "2024-03-01T10:00:00.000Z"),
        ("2024-03-01T10:00:00+02:00", "2024-03-01T08:00:00.000Z"),
        ("2024-03-01 10:00", "2024-03-01T10:00:00.000Z"),
        ("2024-03-01", "2024-03-01T00:00:00.000Z"),
    ],
)
def test_normalize_timestamp(raw, expected):
    assert normalize_timestamp(raw, "visit_datetime") == expected


def test_normalize_timestamp_rejects_garbage():
    with pytest.raises(InvalidInput):
        normalize_timestamp("next tuesday", "visit_datetime")


def test_normalize_date():
    assert normalize_date("2024-03-08T15:00:00Z", "d") == "2024-03-08"
    assert normalize_date("", "d") is None
    assert normalize_date(None, "d") is None


def test_normalize_timestamp_out_of_range_offset_is_invalid():
    # parses fine, but shifting to UTC leaves year 1
    with pytest.raises(InvalidInput):
        normalize_timestamp("0001-01-01T00:30:00+01:00", "visit_datetime")
