"""Time unit definitions used for timer intervals and delays.

All time units share the Second class as their family root and store their
value in seconds. The concrete class records the unit the duration was
expressed in, so a ``Millisecond(500)`` prints as ``500 ms`` while sleeping
for ``float(duration)`` seconds.

Classes:
    Second: Base time unit in seconds (SI unit).
    Nanosecond, Microsecond, Millisecond: Sub-second units.
    Minute, Hour: Larger units.

Functions:
    unit_symbol: Display suffix of a duration's unit.
    to_duration: Coerce timer parameters into a time unit.

Type Aliases:
    Time: Union type for all time units.

Example:
    >>> interval = Millisecond(1500)
    >>> print(interval)  # "1500 ms"
    >>> float(interval)
    1.5
    >>> to_duration(250)  # plain numbers are milliseconds
    250 ms (= 0.25 s)
"""

from __future__ import annotations

from datetime import timedelta
from math import isfinite

from .unit_base import Unit
from .unit_float import UnitFloat


class Second(UnitFloat):
    """Time unit: Second (SI base unit for time).

    Example:
        >>> time_interval = Second(5.5)
        >>> print(time_interval)  # "5.5 s"
    """

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "s"


class Nanosecond(Second):
    """Time unit: Nanosecond (1e-9 seconds)."""

    SCALE_TO_SI = 1e-9
    SYMBOL = "ns"


class Microsecond(Second):
    """Time unit: Microsecond (1e-6 seconds)."""

    SCALE_TO_SI = 1e-6
    SYMBOL = "us"


class Millisecond(Second):
    """Time unit: Millisecond (1e-3 seconds).

    Plain numbers passed to a timer are read as milliseconds.

    Example:
        >>> tick = Millisecond(20)
        >>> print(tick)  # "20 ms"
        >>> print(float(tick))  # 0.02
    """

    SCALE_TO_SI = 1e-3
    SYMBOL = "ms"


class Minute(Second):
    """Time unit: Minute (60 seconds)."""

    SCALE_TO_SI = 60.0
    SYMBOL = "min"


class Hour(Second):
    """Time unit: Hour (3600 seconds).

    Example:
        >>> print(Hour(1.25))  # "1.25 h"
        >>> print(float(Hour(1.25)))  # 4500.0 (seconds)
    """

    SCALE_TO_SI = 3600.0
    SYMBOL = "h"


Time = Second | Nanosecond | Microsecond | Millisecond | Minute | Hour  # Type alias for any time unit

_SYMBOLS: dict[type[Second], str] = {
    Nanosecond: "ns",
    Microsecond: "us",
    Millisecond: "ms",
    Second: "s",
    Minute: "min",
    Hour: "h",
}


def unit_symbol(duration: Time) -> str:
    """Return the display suffix for the unit of ``duration``.

    Only the six standard time units are recognised; any other unit class,
    including user-defined subclasses of Second, gives ``"?"``.
    """
    return _SYMBOLS.get(type(duration), "?")


def to_duration(value: Time | timedelta | int | float) -> Time:
    """Coerce a timer parameter into a non-negative time unit.

    Args:
        value: A time unit (kept as is), a ``datetime.timedelta`` (converted
            to Second) or a plain number of milliseconds.

    Returns:
        Time: The duration as a time unit.

    Raises:
        TypeError: If the value is not a duration (booleans, strings and
            units of another family included).
        ValueError: If the duration is negative or not finite.
    """
    if isinstance(value, Unit):
        Second._check_same_root(type(value))
        duration = value
    elif isinstance(value, timedelta):
        duration = Second(value.total_seconds())
    elif isinstance(value, int | float) and not isinstance(value, bool):
        duration = Millisecond(value)
    else:
        raise TypeError(f"expected a duration, got {type(value).__name__}")

    if not isfinite(float(duration)):
        raise ValueError(f"duration must be finite, got {duration!r}")
    if float(duration) < 0.0:
        raise ValueError(f"duration must be non-negative, got {duration!r}")
    return duration
