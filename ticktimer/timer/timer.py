"""Thread-backed timer that calls a function periodically or once.

This module provides the Timer class: a small scheduling primitive that, once
started, runs one background thread which waits for an optional initial delay
and then repeatedly waits for the interval and calls a zero-argument function.
In single-shot mode the thread stops itself after the first call; in
continuous mode it keeps going until ``stop()`` is called.

Every field the background thread reads (function, interval, single-shot flag
and the run handle) lives in a shared state block guarded by one lock. The
thread only holds that block and its own run handle, never the Timer itself,
so the front-end object can be dropped while a run is in progress. The lock is
held for copies and swaps only; the function is always called outside it.

Components:
    Timer: Periodic or single-shot callback timer

Lifecycle:
    1. Creation: stopped, unless ``auto_start`` is requested
    2. start(): spawns the background thread (no-op if already running)
    3. Ticks: wait interval, call function, repeat (or stop if single-shot)
    4. stop(): cooperative, wakes a pending wait, never joins
    5. join(): optional wait for the background thread to finish

Example:
    >>> from ticktimer import Timer
    >>> from ticktimer.unit import Millisecond
    >>>
    >>> heartbeat = Timer(lambda: print("tick"), Millisecond(500))
    >>> heartbeat.start()
    >>> # ... ticks every 500 ms on its own thread
    >>> heartbeat.stop()
    >>> heartbeat.join(timeout=1.0)
    True
"""

from __future__ import annotations

import inspect
import itertools
import logging
import threading
import weakref
from collections.abc import Callable
from datetime import timedelta

from ticktimer.unit import Second, Time, to_duration, unit_symbol

from .config import TimerConfig

logger = logging.getLogger(__name__)

TimerFunction = Callable[[], object]
ErrorHandler = Callable[[Exception], object]
DurationLike = Time | timedelta | int | float

_timer_ids = itertools.count(1)
_ZERO_TIME = Second(0.0)
_HANDOFF_POLL = 0.01  # seconds between stop checks while waiting for the previous run


def _check_function(function: TimerFunction) -> TimerFunction:
    """Reject anything that cannot be called with no arguments.

    Raises:
        TypeError: If ``function`` is not callable or its signature requires
            arguments. Callables without an introspectable signature (some
            builtins) are accepted as they are.
    """
    if not callable(function):
        raise TypeError(f"timer function must be callable, got {type(function).__name__}")
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return function
    try:
        signature.bind()
    except TypeError as exc:
        raise TypeError(f"timer function must be callable with no arguments ({exc})") from None
    return function


def _check_handler(on_error: ErrorHandler | None) -> ErrorHandler | None:
    if on_error is not None and not callable(on_error):
        raise TypeError(f"on_error must be callable, got {type(on_error).__name__}")
    return on_error


def _format_duration(duration: Time) -> str:
    return f"{duration.to(type(duration)):.12g} {unit_symbol(duration)}"


class _Run:
    """Handle for one start() of a timer."""

    __slots__ = ("stop_event", "finished", "thread")

    def __init__(self):
        self.stop_event = threading.Event()
        self.finished = threading.Event()
        self.thread: threading.Thread | None = None


class _TimerState:
    """State shared between a Timer and its background thread."""

    def __init__(
        self,
        function: TimerFunction,
        interval: Time,
        delay: Time,
        single_shot: bool,
        on_error: ErrorHandler | None,
    ):
        self.lock = threading.Lock()
        self.function = function
        self.interval = interval
        self.delay = delay
        self.single_shot = single_shot
        self.on_error = on_error
        self.run: _Run | None = None  # active run, None while stopped
        self.last_run: _Run | None = None
        self.tick_count = 0
        self.last_error: Exception | None = None

    def request_stop(self) -> bool:
        """Ask the active run to stop. Returns False if nothing was running."""
        with self.lock:
            run = self.run
            self.run = None
        if run is None:
            return False
        run.stop_event.set()
        return True

    def release(self) -> None:
        """Called when the owning Timer is collected.

        A continuous run is stopped since nothing could stop it any more; a
        pending single shot is left to fire and end on its own.
        """
        with self.lock:
            single_shot = self.single_shot
        if not single_shot:
            self.request_stop()

    def detach(self, run: _Run) -> None:
        """Mark ``run`` stopped if it is still the active run."""
        with self.lock:
            if self.run is run:
                self.run = None
        run.stop_event.set()

    def finish(self, run: _Run) -> None:
        self.detach(run)
        run.finished.set()

    def fail(self, run: _Run, exc: Exception) -> None:
        """Record a failure of the timer function and stop the run."""
        with self.lock:
            self.last_error = exc
            on_error = self.on_error
        self.detach(run)
        if on_error is None:
            return
        try:
            on_error(exc)
        except Exception:
            logger.exception("Timer error handler raised")


def _wait_for_previous(previous: _Run | None, stop_event: threading.Event) -> bool:
    """Block until ``previous`` has finished its last tick.

    Returns False if this run was stopped while waiting.
    """
    if previous is None:
        return True
    while not previous.finished.wait(_HANDOFF_POLL):
        if stop_event.is_set():
            return False
    return not stop_event.is_set()


def _run_loop(state: _TimerState, run: _Run, previous: _Run | None, delay: Time) -> None:
    """Background thread body for one run.

    A run started right after a stop waits for the previous run's thread to
    exit, so ticks of one timer never overlap.
    """
    stop_event = run.stop_event
    name = threading.current_thread().name
    try:
        if not _wait_for_previous(previous, stop_event):
            return
        if delay > _ZERO_TIME and stop_event.wait(float(delay)):
            return
        while True:
            with state.lock:
                interval = state.interval
            if stop_event.is_set():
                return
            if interval > _ZERO_TIME and stop_event.wait(float(interval)):
                return
            if stop_event.is_set():
                return

            with state.lock:
                function = state.function
            try:
                function()
            except Exception as exc:
                logger.exception("%s: timer function raised, stopping", name)
                state.fail(run, exc)
                return

            with state.lock:
                state.tick_count += 1
                single_shot = state.single_shot
            if single_shot:
                logger.debug("%s: single shot done", name)
                return
    finally:
        state.finish(run)


class Timer:
    """Periodic or single-shot timer running its function on its own thread.

    The timer is created stopped (unless ``auto_start`` is set). ``start()``
    launches one background thread; further ``start()`` calls while it runs
    are no-ops. The thread waits ``delay`` once, then loops: wait
    ``interval``, call ``function``. A stop request is checked before and
    after every wait and wakes the wait immediately, so an in-progress wait is
    cut short. A call that has already begun always runs to completion.

    Interval, single-shot flag and function may be changed at any time; the
    thread picks up the new value on its next read. A new interval therefore
    applies from the next wait, not the one in progress. The delay is read
    once per ``start()``.

    If the function raises, the exception is logged, stored in
    ``last_error``, passed to ``on_error`` (when given) and the timer stops.

    Timers cannot be copied or pickled: a copy would not share the running
    state with the thread. When a continuous Timer is garbage collected its
    active run is asked to stop; a pending single shot still fires once.

    Args:
        function: Zero-argument callable invoked on every tick. Its return
            value is ignored.
        interval: Wait before each tick. A time unit, a ``timedelta`` or a
            plain number of milliseconds.
        delay: One-time wait before the first interval. Same forms as
            ``interval``. Defaults to zero.
        single_shot: Tick once then stop. Defaults to False (continuous).
        auto_start: Call ``start()`` at the end of construction.
        name: Thread name, also used in the description.
        daemon: Whether the background thread is a daemon thread.
        on_error: Optional callable receiving the exception raised by
            ``function``.

    Raises:
        TypeError: If ``function`` is not callable with no arguments, or a
            duration has the wrong type.
        ValueError: If a duration is negative or not finite.

    Example:
        >>> from ticktimer.unit import Millisecond
        >>> once = Timer(lambda: print("done"), Millisecond(200), single_shot=True)
        >>> once.running
        False
        >>> once.start().running
        True
    """

    def __init__(
        self,
        function: TimerFunction,
        interval: DurationLike,
        delay: DurationLike = 0,
        single_shot: bool = False,
        auto_start: bool = False,
        *,
        name: str | None = None,
        daemon: bool = True,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._state = _TimerState(
            _check_function(function),
            to_duration(interval),
            to_duration(delay),
            bool(single_shot),
            _check_handler(on_error),
        )
        self._name = name or f"Timer-{next(_timer_ids)}"
        self._daemon = daemon
        # holds the state, not self, so it can run once self is unreachable
        self._finalizer = weakref.finalize(self, self._state.release)
        if auto_start:
            self.start()

    @classmethod
    def from_config(
        cls,
        function: TimerFunction,
        config: TimerConfig,
        on_error: ErrorHandler | None = None,
    ) -> Timer:
        """Create a timer from a :class:`TimerConfig`."""
        return cls(
            function,
            config.interval,
            config.delay,
            config.single_shot,
            config.auto_start,
            name=config.name,
            daemon=config.daemon,
            on_error=on_error,
        )

    # ------------------------------------------------------------------ control

    def start(self) -> Timer:
        """Start the timer if it is stopped.

        The timer reports running as soon as this returns. Calling it while
        the timer is running does nothing. If the thread of a previous run is
        still finishing a tick, the new run waits for it before its delay.

        Returns:
            Timer: This timer, for chaining.
        """
        state = self._state
        with state.lock:
            if state.run is not None:
                return self
            run = _Run()
            run.thread = threading.Thread(
                target=_run_loop,
                args=(state, run, state.last_run, state.delay),
                name=self._name,
                daemon=self._daemon,
            )
            state.run = run
            state.last_run = run
            interval, delay, single_shot = state.interval, state.delay, state.single_shot

        logger.debug(
            "%s: starting (interval=%s, delay=%s, single_shot=%s)",
            self._name,
            interval,
            delay,
            single_shot,
        )
        try:
            run.thread.start()
        except RuntimeError:
            state.finish(run)
            raise
        return self

    def stop(self) -> Timer:
        """Request the timer to stop. Does not wait for the thread.

        A wait in progress is cut short. A tick already being executed
        finishes normally. Stopping a stopped timer does nothing.

        Returns:
            Timer: This timer, for chaining.
        """
        if self._state.request_stop():
            logger.debug("%s: stop requested", self._name)
        return self

    def join(self, timeout: float | None = None) -> bool:
        """Wait until the thread of the most recent run has finished.

        Stop the timer first when it is continuous, otherwise this waits for
        as long as it keeps running.

        Args:
            timeout: Maximum wait in seconds, None to wait indefinitely.

        Returns:
            bool: True if the thread finished (or the timer never started).

        Raises:
            RuntimeError: If called from the timer's own thread.
        """
        with self._state.lock:
            run = self._state.last_run
        if run is None:
            return True
        if run.thread is threading.current_thread():
            raise RuntimeError("cannot join a timer from its own thread")
        return run.finished.wait(timeout)

    # ------------------------------------------------------------------ state

    @property
    def running(self) -> bool:
        """True while a run is active. May be stale as soon as it returns."""
        with self._state.lock:
            return self._state.run is not None

    @property
    def stopped(self) -> bool:
        return not self.running

    @property
    def name(self) -> str:
        return self._name

    @property
    def tick_count(self) -> int:
        """Number of completed ticks over the life of the timer."""
        with self._state.lock:
            return self._state.tick_count

    @property
    def last_error(self) -> Exception | None:
        """Last exception raised by the timer function, if any."""
        with self._state.lock:
            return self._state.last_error

    # ------------------------------------------------------------------ settings

    @property
    def interval(self) -> Time:
        with self._state.lock:
            return self._state.interval

    @interval.setter
    def interval(self, value: DurationLike) -> None:
        duration = to_duration(value)
        with self._state.lock:
            self._state.interval = duration

    @property
    def delay(self) -> Time:
        """Initial delay applied by the next ``start()``."""
        with self._state.lock:
            return self._state.delay

    @delay.setter
    def delay(self, value: DurationLike) -> None:
        duration = to_duration(value)
        with self._state.lock:
            self._state.delay = duration

    @property
    def single_shot(self) -> bool:
        with self._state.lock:
            return self._state.single_shot

    @single_shot.setter
    def single_shot(self, value: bool) -> None:
        with self._state.lock:
            self._state.single_shot = bool(value)

    @property
    def function(self) -> TimerFunction:
        """The function called on each tick."""
        with self._state.lock:
            return self._state.function

    @function.setter
    def function(self, function: TimerFunction) -> None:
        self.set_function(function)

    def set_function(self, function: TimerFunction) -> Timer:
        """Replace the function called on each tick.

        Safe while running: the background thread takes the function under the
        same lock just before each call, so a tick calls either the old or
        the new function, never anything in between.

        Returns:
            Timer: This timer, for chaining.
        """
        _check_function(function)
        with self._state.lock:
            self._state.function = function
        return self

    @property
    def on_error(self) -> ErrorHandler | None:
        with self._state.lock:
            return self._state.on_error

    @on_error.setter
    def on_error(self, on_error: ErrorHandler | None) -> None:
        _check_handler(on_error)
        with self._state.lock:
            self._state.on_error = on_error

    # ------------------------------------------------------------------ display

    def describe(self) -> str:
        """Return a multi-line summary of interval, delay and mode.

        Example:
            >>> print(Timer(print, 500, name="blink").describe())
            Timer 'blink'
              interval    : 500 ms
              delay       : 0 ms
              single shot : false
        """
        with self._state.lock:
            interval, delay, single_shot = (
                self._state.interval,
                self._state.delay,
                self._state.single_shot,
            )
        return "\n".join(
            [
                f"Timer '{self._name}'",
                f"  interval    : {_format_duration(interval)}",
                f"  delay       : {_format_duration(delay)}",
                f"  single shot : {'true' if single_shot else 'false'}",
            ]
        )

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        state = "running" if self.running else "stopped"
        return (
            f"<Timer {self._name!r} interval={_format_duration(self.interval)} "
            f"single_shot={self.single_shot} {state}>"
        )

    # ------------------------------------------------------------------ protocol

    def __enter__(self) -> Timer:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __copy__(self):
        raise TypeError("Timer objects cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("Timer objects cannot be copied")

    def __reduce_ex__(self, protocol):
        raise TypeError("Timer objects cannot be pickled")
