"""
Basic example: a continuous timer whose function is replaced while it runs.
"""

import logging
import time

from ticktimer import Timer
from ticktimer.unit import Millisecond


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(threadName)s %(message)s")

    print("=" * 60)
    print("ticktimer - Basic Example")
    print("=" * 60)

    counts = {"A": 0, "B": 0}

    def say_a():
        counts["A"] += 1
        print(f"A ({counts['A']})")

    def say_b():
        counts["B"] += 1
        print(f"B ({counts['B']})")

    timer = Timer(say_a, Millisecond(1000), name="printer")
    print(timer)

    timer.start()
    time.sleep(2.1)

    print("-" * 60)
    print("Replacing the function...")
    timer.set_function(say_b)
    time.sleep(2.1)

    timer.stop()
    timer.join()
    print(f"\nTicks: A={counts['A']}, B={counts['B']} (total {timer.tick_count})")


if __name__ == "__main__":
    main()
