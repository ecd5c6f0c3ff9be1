import math
from datetime import datetime


def convert_to_seconds(hours=0, minutes=0, seconds=0):
    """
    Converts hours, minutes, and seconds into a total duration in seconds.

    Args:
        hours (int/float): Number of hours. Defaults to 0.
        minutes (int/float): Number of minutes. Defaults to 0.
        seconds (int/float): Number of seconds. Defaults to 0.

    Returns:
        int/float: The total duration in seconds.

    Raises:
        ValueError: If any input is negative.
    """
    if any(val < 0 for val in [hours, minutes, seconds]):
        raise ValueError("Time components cannot be negative.")
    return (hours * 3600) + (minutes * 60) + seconds


def format_seconds_to_ms(total_seconds):
    """
    Converts a number of seconds into the MM:SS string shown on the session timer.
    Minutes are not wrapped into hours, so 75 minutes reads "75:00".
    """
    if total_seconds < 0:
        return "-Invalid Time-"
    total_seconds = int(total_seconds)
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes:02}:{seconds:02}"


def format_seconds_to_hms(total_seconds):
    """
    Converts a total number of seconds into a human-readable HH:MM:SS string.
    """
    if total_seconds < 0:
        return "-Invalid Time-"

    total_seconds = int(total_seconds)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (2.5 -> 3, 3.5 -> 4)."""
    return int(math.floor(value + 0.5))


def parse_iso_timestamp(value: str) -> datetime:
    """
    Parses an ISO-8601 timestamp, including the trailing 'Z' form written by browsers.

    Raises:
        ValueError: If the string is not a timestamp.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not an ISO-8601 timestamp: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)

