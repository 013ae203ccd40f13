"""Timer primitive for calling a function periodically or once.

This package provides a lightweight alternative to an event loop or a full
scheduler when an application only needs "call this every N time units".
Each Timer owns at most one background thread at a time.

Components:
    Timer: Periodic or single-shot callback timer
    TimerConfig: Dataclass bundling every construction option

Timer Lifecycle:
    1. Creation: Timer(function, interval, ...) or Timer.from_config()
    2. start(): Spawns the background thread (no-op while running)
    3. Ticks: Wait interval, call function; single-shot timers stop themselves
    4. stop(): Cooperative stop, wakes a pending wait
    5. join(): Optional wait for the background thread to exit

Example:
    >>> from ticktimer.timer import Timer, TimerConfig
    >>> from ticktimer.unit import Second
    >>>
    >>> config = TimerConfig(interval=Second(1), single_shot=True, name="flush")
    >>> flush = Timer.from_config(cache.flush, config)
    >>> flush.start()
"""

from .config import TimerConfig
from .timer import Timer

__all__ = ["Timer", "TimerConfig"]
