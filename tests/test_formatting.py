import pytest

from tariffcompare.formatting import format_currency, format_duration, format_rate, format_time
from tariffcompare.models import ChargingDuration


def test_format_currency():
    assert format_currency(1162.0346) == "£1,162.03"
    assert format_currency(3.828) == "£3.83"
    assert format_currency(0) == "£0.00"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("01:30", "1:30 AM"),
        ("08:05", "8:05 AM"),
        ("00:00", "12:00 AM"),
        ("12:00", "12:00 PM"),
        ("23:45", "11:45 PM"),
        (None, ""),
    ],
)
def test_format_time(value, expected):
    assert format_time(value) == expected


@pytest.mark.parametrize(
    "duration,expected",
    [
        (ChargingDuration(0, 12), "12 mins"),
        (ChargingDuration(1, 0), "1 hr"),
        (ChargingDuration(2, 0), "2 hrs"),
        (ChargingDuration(1, 5), "1 hr 5 mins"),
        (ChargingDuration(13, 53), "13 hrs 53 mins"),
    ],
)
def test_format_duration(duration, expected):
    assert format_duration(duration) == expected


def test_format_rate():
    assert format_rate(12.76) == "12.76"
    assert format_rate(61.2) == "61.20"
    assert format_rate(None) == "N/A"
