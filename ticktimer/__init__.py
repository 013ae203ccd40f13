"""Periodic and single-shot callback timer running on a background thread.

ticktimer provides one reusable primitive, :class:`Timer`, for applications
that need "call this every N time units" without an event loop or a scheduler
framework. A started timer runs one independent thread that optionally waits
an initial delay, then repeatedly waits its interval and calls a zero-argument
function, either once (single-shot) or until stopped (continuous).

Framework Components:
    Timer (ticktimer.timer):
        • Start/stop state machine with idempotent start and stop
        • Interval, delay, single-shot flag and function editable while running
        • Failures of the function captured, logged and reported via on_error

    Durations (ticktimer.unit):
        • Nanosecond, Microsecond, Millisecond, Second, Minute, Hour
        • Values stored in seconds, displayed in the unit they were given in
        • Plain numbers passed to a timer are read as milliseconds

    Cadence analysis (ticktimer.analyze):
        • TickRecorder to timestamp ticks from the timer thread
        • Interval statistics, drift tables and plots

Usage Patterns:
    Continuous timer:
        >>> from ticktimer import Timer
        >>> from ticktimer.unit import Millisecond
        >>>
        >>> poll = Timer(check_queue, Millisecond(250))
        >>> poll.start()
        >>> ...
        >>> poll.stop()

    Single shot after a delay:
        >>> report = Timer(send_report, Second(1), delay=Minute(5), single_shot=True)
        >>> report.start()  # fires even if `report` is dropped

    Scoped timer:
        >>> with Timer(refresh, 1000):
        ...     run_ui()

Threading Notes:
    stop() never blocks; use join() after stop() when the caller must know
    the thread has exited. Dropping the last reference to a continuous Timer
    stops it; a single shot still fires.

Integration Requirements:
    • Python 3.12+
    • numpy, pandas and matplotlib for ticktimer.analyze (`analyze` extra)
"""

from ticktimer.timer import Timer, TimerConfig

__all__ = ["Timer", "TimerConfig"]
