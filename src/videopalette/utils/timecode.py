from videopalette.errors import TimestampError


def parse_timestamp(value: str) -> float:
    """
    Parse an HH:MM:SS timestamp into seconds.

    Parts are read left to right as hours, minutes and seconds; missing
    trailing parts count as zero, so "1" is one hour and "0:2" two minutes.

    Args:
        value: Timestamp string

    Returns:
        Offset in seconds

    Raises:
        TimestampError: If the string is empty, has more than three parts,
            or any part is not a non-negative integer
    """
    if value is None or not value.strip():
        raise TimestampError("Timestamp is empty")

    parts = value.strip().split(":")
    if len(parts) > 3:
        raise TimestampError(f"Timestamp '{value}' is not in HH:MM:SS format")

    numbers = []
    for part in parts:
        if not part.isdecimal():
            raise TimestampError(f"Timestamp '{value}' is not in HH:MM:SS format")
        numbers.append(int(part))

    numbers.extend([0] * (3 - len(numbers)))
    hours, minutes, seconds = numbers
    return float(hours * 3600 + minutes * 60 + seconds)


def format_timestamp(seconds: float) -> str:
    """Convert seconds to HH:MM:SS format."""
    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours:02d}:{minutes:02d}:{total_seconds % 60:02d}"


def validate_window(start: float | None, end: float | None):
    """Raise TimestampError unless both bounds are non-negative and end >= start."""
    if start is not None and start < 0:
        raise TimestampError("Start time cannot be negative")
    if end is not None and end < 0:
        raise TimestampError("End time cannot be negative")
    if start is not None and end is not None and end < start:
        raise TimestampError(
            f"End time {format_timestamp(end)} is before start time {format_timestamp(start)}"
        )
