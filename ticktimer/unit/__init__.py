"""Typed durations for timer configuration.

This package provides the unit system the timer uses for its interval and
delay. Every duration is a float holding seconds, tagged with the unit it was
expressed in so it can be displayed with the right suffix.

Architecture:
    - unit_base: Foundation Unit class with family management system
    - unit_float: Float-based units with automatic SI conversion
    - unit_time: Time units (Nanosecond .. Hour), symbol table and coercion

Example:
    >>> from ticktimer.unit import Millisecond, Second, to_duration
    >>> interval = Millisecond(500)
    >>> interval + Second(1)
    1500 ms (= 1.5 s)
    >>> to_duration(20)  # plain numbers are milliseconds
    20 ms (= 0.02 s)
"""

from .unit_base import Unit
from .unit_float import UnitFloat
from .unit_time import (
    Hour,
    Microsecond,
    Millisecond,
    Minute,
    Nanosecond,
    Second,
    Time,
    to_duration,
    unit_symbol,
)

__all__ = [
    # Base classes
    "Unit",
    "UnitFloat",
    # Time units
    "Nanosecond",
    "Microsecond",
    "Millisecond",
    "Second",
    "Minute",
    "Hour",
    "Time",
    # Helpers
    "to_duration",
    "unit_symbol",
]
