"""Shared time-formatting utilities."""

from datetime import datetime, timezone
from typing import Optional, Union


def to_iso8601(when: Optional[Union[datetime, float, int]] = None) -> str:
    """Format a moment as the millisecond UTC timestamp Alexa expects.

    Args:
        when: ``None`` for now, an aware/naive datetime, or epoch milliseconds
            as delivered in device event details.
    """
    if when is None:
        moment = datetime.now(timezone.utc)
    elif isinstance(when, datetime):
        moment = when.astimezone(timezone.utc)
    else:
        moment = datetime.fromtimestamp(when / 1000.0, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
