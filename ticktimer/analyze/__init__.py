from .ticks import (
    TickRecorder,
    analyze_tick_intervals,
    plot_tick_intervals,
    summarize_ticks,
    tick_intervals,
)

__all__ = [
    "TickRecorder",
    "analyze_tick_intervals",
    "plot_tick_intervals",
    "summarize_ticks",
    "tick_intervals",
]
