"""Tick timestamp recording and cadence analysis.

A TickRecorder is handed to a Timer as its function (or wraps the real
function) and timestamps every tick from the timer thread. The helpers below
turn those timestamps into interval statistics, a per-tick drift table and a
plot, which is how timer cadence is checked by hand or in tests.

Note that a timer waits the full interval after every tick, so intervals are
expected to be slightly longer than configured (by the duration of the call
plus scheduling latency) and drift accumulates over a run.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ticktimer.unit import Time


class TickRecorder:
    """Zero-argument callable that records a timestamp on every call.

    Args:
        function: Optional callable invoked after the timestamp is taken.
        clock: Time source, ``time.perf_counter`` by default.
    """

    def __init__(
        self,
        function: Callable[[], object] | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._function = function
        self._clock = clock
        self._lock = threading.Lock()
        self._timestamps: list[float] = []

    def __call__(self) -> None:
        stamp = self._clock()
        with self._lock:
            self._timestamps.append(stamp)
        if self._function is not None:
            self._function()

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._timestamps)

    @property
    def timestamps(self) -> list[float]:
        """Copy of the recorded timestamps, oldest first."""
        with self._lock:
            return list(self._timestamps)

    def reset(self) -> None:
        with self._lock:
            self._timestamps.clear()


def _expected_seconds(expected: Time | float | None) -> float | None:
    if expected is None:
        return None
    return float(expected)


def tick_intervals(timestamps: Sequence[float]) -> np.ndarray:
    """Return the time between consecutive ticks, in seconds."""
    return np.diff(np.asarray(timestamps, dtype=float))


def summarize_ticks(
    timestamps: Sequence[float], expected: Time | float | None = None
) -> dict[str, float | int | None]:
    """Summary statistics of tick intervals.

    Args:
        timestamps: Tick times in seconds.
        expected: Configured interval (time unit or seconds), used for drift.

    Returns:
        dict: ``count`` (ticks), ``mean``, ``std``, ``min``, ``max`` of the
        intervals in seconds and ``mean_drift`` (mean interval minus
        expected). Interval statistics are None with fewer than two ticks.
    """
    intervals = tick_intervals(timestamps)
    summary: dict[str, float | int | None] = {
        "count": len(timestamps),
        "mean": None,
        "std": None,
        "min": None,
        "max": None,
        "mean_drift": None,
    }
    if intervals.size == 0:
        return summary

    summary["mean"] = float(np.mean(intervals))
    summary["std"] = float(np.std(intervals, ddof=1)) if intervals.size > 1 else 0.0
    summary["min"] = float(np.min(intervals))
    summary["max"] = float(np.max(intervals))
    expected_s = _expected_seconds(expected)
    if expected_s is not None:
        summary["mean_drift"] = summary["mean"] - expected_s
    return summary


def analyze_tick_intervals(
    timestamps: Sequence[float],
    expected: Time | float | None = None,
    title: str = "Tick Interval Analysis",
) -> pd.DataFrame | None:
    """Build a per-tick table of offsets, intervals and drift.

    Args:
        timestamps: Tick times in seconds.
        expected: Configured interval (time unit or seconds).
        title: Heading of the printed report.

    Returns:
        pandas.DataFrame: Indexed by tick number (starting at 1 for the
        second tick), with columns ``offset`` (seconds since the first tick),
        ``interval`` and, when ``expected`` is given, ``drift``. None when
        fewer than two ticks were recorded.
    """
    print(f"=== {title} ===")
    print(f"Recorded ticks: {len(timestamps)}")

    if len(timestamps) < 2:
        print("Not enough ticks to compute intervals.")
        return None

    stamps = np.asarray(timestamps, dtype=float)
    df = pd.DataFrame(
        {
            "offset": stamps[1:] - stamps[0],
            "interval": np.diff(stamps),
        },
        index=pd.RangeIndex(1, len(stamps), name="tick"),
    )

    expected_s = _expected_seconds(expected)
    if expected_s is not None:
        df["drift"] = df["interval"] - expected_s

    print(f"Mean interval: {df['interval'].mean() * 1000.0:.2f} ms")
    if expected_s is not None:
        print(f"Mean drift: {df['drift'].mean() * 1000.0:+.2f} ms")
    return df


def plot_tick_intervals(
    timestamps: Sequence[float],
    expected: Time | float | None = None,
    title: str = "Tick Intervals",
    save_path: str | None = None,
):
    """Plot each tick interval in milliseconds against its tick number.

    Args:
        timestamps: Tick times in seconds.
        expected: Configured interval, drawn as a horizontal reference line.
        title: Figure title.
        save_path: When given, the figure is written there and closed.

    Returns:
        matplotlib.figure.Figure | None: The figure, or None when it was
        saved or there were fewer than two ticks.
    """
    intervals_ms = tick_intervals(timestamps) * 1000.0
    if intervals_ms.size == 0:
        print("No data available for plotting.")
        return None

    fig, ax = plt.subplots(figsize=(10, 4))
    ticks = np.arange(1, intervals_ms.size + 1)
    ax.plot(ticks, intervals_ms, marker="o", linewidth=1.0, label="measured")

    expected_s = _expected_seconds(expected)
    if expected_s is not None:
        ax.axhline(expected_s * 1000.0, color="tab:red", linestyle="--", label="expected")

    ax.set_title(title)
    ax.set_xlabel("Tick")
    ax.set_ylabel("Interval (ms)")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=100)
        plt.close(fig)
        return None
    return fig
