from datetime import datetime, timezone, tzinfo

EXPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FILENAME_TIMESTAMP_FORMAT = "%Y%m%d_%H%M"
DISPLAY_DATE_FORMAT = "%b %d, %Y"
DISPLAY_DATETIME_FORMAT = "%b %d, %Y %I:%M %p"


def parse_timestamp(value: str) -> datetime:
    """
    Parses an ISO-8601 timestamp as written by the registration flow.

    A trailing `Z` is accepted as UTC. Timestamps without an offset are left naive,
    which `datetime.astimezone` treats as local time.

    Args:
        value (str): ISO-8601 timestamp string.

    Returns:
        datetime: Parsed timestamp.

    Raises:
        ValueError: If the string is not an ISO-8601 timestamp.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text)


def format_timestamp(
    value: str, fmt: str = EXPORT_TIMESTAMP_FORMAT, tz: tzinfo | None = None
) -> str:
    """
    Formats an ISO-8601 timestamp in local time (or `tz`, when given).

    Args:
        value (str): ISO-8601 timestamp string.
        fmt (str): strftime format for the output.
        tz (tzinfo | None): Target timezone. Defaults to the local timezone.

    Returns:
        str: Formatted timestamp.
    """
    return parse_timestamp(value).astimezone(tz).strftime(fmt)


def now_iso(now: datetime | None = None) -> str:
    """Returns `now` (default: current time) as a UTC ISO-8601 string with a `Z` suffix."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def format_answer(value) -> str:
    """Renders a form answer; sequences are joined with commas."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def answer_label(key: str) -> str:
    """Turns a form answer key such as `field_dietary_needs` into `Dietary Needs`."""
    return key.replace("field_", "").replace("_", " ").strip().title()


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    return f"{count} {singular if count == 1 else (plural or singular + 'S')}"
