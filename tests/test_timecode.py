"""
Tests for HH:MM:SS timestamp handling.
"""
import pytest

from videopalette.errors import TimestampError
from videopalette.utils.timecode import format_timestamp, parse_timestamp, validate_window


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("00:00:00", 0.0),
            ("01:02:03", 3723.0),
            ("00:10:00", 600.0),
            ("0:2", 120.0),
            ("1", 3600.0),
            (" 00:00:05 ", 5.0),
        ],
    )
    def test_valid(self, value, seconds):
        assert parse_timestamp(value) == seconds

    @pytest.mark.parametrize("value", ["", "   ", "a:b:c", "1:2:3:4", "-1:00:00", "1::2", "1.5"])
    def test_malformed(self, value):
        with pytest.raises(TimestampError):
            parse_timestamp(value)


class TestFormatTimestamp:
    def test_format(self):
        assert format_timestamp(3723) == "01:02:03"
        assert format_timestamp(59.9) == "00:00:59"


class TestValidateWindow:
    def test_open_ended_windows(self):
        validate_window(None, None)
        validate_window(5.0, None)
        validate_window(None, 5.0)
        validate_window(5.0, 5.0)

    def test_end_before_start(self):
        with pytest.raises(TimestampError):
            validate_window(10.0, 5.0)

    def test_negative(self):
        with pytest.raises(TimestampError):
            validate_window(-1.0, None)
