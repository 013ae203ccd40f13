"""
Two timers: the slow one switches the function called by the fast one on every
tick, and the tick cadence of the fast one is analyzed afterwards.
"""

import time

from ticktimer import Timer
from ticktimer.analyze import TickRecorder, analyze_tick_intervals, plot_tick_intervals
from ticktimer.unit import Millisecond


def main():
    f1 = TickRecorder(lambda: print("f1"))
    f2 = TickRecorder(lambda: print("f2"))

    fast = Timer(f1, Millisecond(500), name="fast")
    use_f2 = False

    def toggle():
        nonlocal use_f2
        use_f2 = not use_f2
        fast.set_function(f2 if use_f2 else f1)

    slow = Timer(toggle, Millisecond(1000), delay=Millisecond(250), name="slow")

    print(fast)
    print(slow)
    fast.start()
    slow.start()

    time.sleep(float(fast.interval) * 10)

    slow.stop()
    fast.stop()
    fast.join()
    slow.join()

    timestamps = sorted(f1.timestamps + f2.timestamps)
    df = analyze_tick_intervals(timestamps, expected=fast.interval, title="Fast Timer Cadence")
    if df is not None:
        print(df.round(4))
        plot_tick_intervals(timestamps, expected=fast.interval, save_path="fast_timer_ticks.png")


if __name__ == "__main__":
    main()
