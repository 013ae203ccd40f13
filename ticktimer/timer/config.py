"""Configuration for timer construction."""

from dataclasses import dataclass, field

from ticktimer.unit import Millisecond, Time, to_duration


@dataclass
class TimerConfig:
    """Full set of timer construction options.

    ``interval`` and ``delay`` accept anything :func:`to_duration` accepts and
    are normalised to time units on creation.
    """

    interval: Time = field(default_factory=lambda: Millisecond(1000))
    delay: Time = field(default_factory=lambda: Millisecond(0))
    single_shot: bool = False
    auto_start: bool = False
    name: str | None = None
    daemon: bool = True  # background thread does not keep the interpreter alive

    def __post_init__(self):
        self.interval = to_duration(self.interval)
        self.delay = to_duration(self.delay)
