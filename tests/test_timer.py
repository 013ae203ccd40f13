"""
Tests for the Timer state machine and its threading behaviour.

Timing assertions use generous margins; intervals are kept short except in
the two end-to-end scenarios.
"""

import copy
import gc
import pickle
import subprocess
import sys
import threading
import time
import unittest

from ticktimer import Timer, TimerConfig
from ticktimer.unit import Microsecond, Millisecond, Second


class Counter:
    """Thread-safe call counter usable as a timer function."""

    def __init__(self):
        self._lock = threading.Lock()
        self.count = 0
        self.calls = []

    def __call__(self):
        with self._lock:
            self.count += 1
            self.calls.append(time.perf_counter())


class TestTimerConstruction(unittest.TestCase):
    """Test Timer construction and validation."""

    def test_created_stopped(self):
        """Test that a new timer is stopped and has not ticked."""
        timer = Timer(Counter(), Millisecond(50))
        self.assertFalse(timer.running)
        self.assertTrue(timer.stopped)
        self.assertEqual(timer.tick_count, 0)

    def test_defaults(self):
        """Test default delay and continuous mode."""
        timer = Timer(Counter(), 100)
        self.assertIsInstance(timer.interval, Millisecond)
        self.assertAlmostEqual(float(timer.interval), 0.1)
        self.assertEqual(float(timer.delay), 0.0)
        self.assertFalse(timer.single_shot)

    def test_auto_start(self):
        """Test that auto_start starts the timer during construction."""
        timer = Timer(Counter(), Millisecond(50), auto_start=True)
        try:
            self.assertTrue(timer.running)
        finally:
            timer.stop()
            timer.join(1.0)

    def test_from_config(self):
        """Test construction from a TimerConfig."""
        config = TimerConfig(interval=Second(2), delay=250, single_shot=True, name="cfg")
        timer = Timer.from_config(Counter(), config)
        self.assertEqual(timer.name, "cfg")
        self.assertEqual(float(timer.interval), 2.0)
        self.assertAlmostEqual(float(timer.delay), 0.25)
        self.assertTrue(timer.single_shot)
        self.assertFalse(timer.running)

    def test_rejects_non_callable(self):
        """Test that a non-callable function raises TypeError."""
        with self.assertRaises(TypeError):
            Timer(42, Millisecond(10))

    def test_rejects_function_with_required_arguments(self):
        """Test that functions needing arguments raise TypeError."""
        with self.assertRaises(TypeError):
            Timer(lambda value: value, Millisecond(10))

    def test_accepts_defaulted_arguments(self):
        """Test that functions with only defaulted arguments are accepted."""
        timer = Timer(lambda value=1: value, Millisecond(10))
        self.assertFalse(timer.running)

    def test_rejects_invalid_durations(self):
        """Test interval and delay validation."""
        with self.assertRaises(ValueError):
            Timer(Counter(), -5)
        with self.assertRaises(ValueError):
            Timer(Counter(), 10, delay=-1)
        with self.assertRaises(TypeError):
            Timer(Counter(), "1s")

    def test_rejects_non_callable_error_handler(self):
        """Test that on_error must be callable."""
        with self.assertRaises(TypeError):
            Timer(Counter(), 10, on_error="log")

    def test_not_copyable(self):
        """Test that timers cannot be copied or pickled."""
        timer = Timer(Counter(), Millisecond(10))
        with self.assertRaises(TypeError):
            copy.copy(timer)
        with self.assertRaises(TypeError):
            copy.deepcopy(timer)
        with self.assertRaises(TypeError):
            pickle.dumps(timer)


class TestTimerLifecycle(unittest.TestCase):
    """Test start/stop behaviour."""

    def test_double_start_spawns_one_thread(self):
        """Test that a second start() while running is a no-op."""
        counter = Counter()
        timer = Timer(counter, Millisecond(100), single_shot=True)
        timer.start()
        timer.start()
        time.sleep(0.35)
        self.assertEqual(counter.count, 1)
        self.assertFalse(timer.running)

    def test_start_returns_timer(self):
        """Test that start() and stop() return the timer for chaining."""
        timer = Timer(Counter(), Millisecond(50))
        self.assertIs(timer.start(), timer)
        self.assertIs(timer.stop(), timer)
        self.assertTrue(timer.join(1.0))

    def test_single_shot_with_delay(self):
        """Test a single shot fires once, no earlier than delay + interval."""
        counter = Counter()
        timer = Timer(counter, Millisecond(100), delay=Millisecond(50), single_shot=True)
        started = time.perf_counter()
        timer.start()
        self.assertTrue(timer.join(1.0))

        self.assertEqual(counter.count, 1)
        self.assertGreaterEqual(counter.calls[0] - started, 0.15 - 0.005)
        self.assertFalse(timer.running)
        time.sleep(0.2)
        self.assertEqual(counter.count, 1)

    def test_continuous_ticks(self):
        """Test that a continuous timer ticks about K times in K intervals."""
        counter = Counter()
        timer = Timer(counter, Millisecond(100))
        timer.start()
        time.sleep(0.55)
        try:
            self.assertIn(counter.count, (4, 5, 6))
            self.assertTrue(timer.running)
        finally:
            timer.stop()
            timer.join(1.0)

    def test_stop_during_wait(self):
        """Test that stop() during the interval wait prevents any tick."""
        counter = Counter()
        timer = Timer(counter, Millisecond(200))
        timer.start()
        time.sleep(0.05)
        stop_requested = time.perf_counter()
        timer.stop()

        self.assertFalse(timer.running)
        self.assertTrue(timer.join(0.2))
        self.assertLess(time.perf_counter() - stop_requested, 0.2)
        time.sleep(0.3)
        self.assertEqual(counter.count, 0)

    def test_stop_during_delay(self):
        """Test that stop() during the initial delay prevents any tick."""
        counter = Counter()
        timer = Timer(counter, Millisecond(10), delay=Millisecond(300))
        timer.start()
        time.sleep(0.05)
        timer.stop()
        self.assertTrue(timer.join(0.2))
        self.assertEqual(counter.count, 0)

    def test_stop_when_stopped(self):
        """Test that stop() on a stopped timer is a no-op."""
        timer = Timer(Counter(), Millisecond(10))
        timer.stop()
        timer.stop()
        self.assertFalse(timer.running)
        self.assertTrue(timer.join(0.1))

    def test_restart_after_stop(self):
        """Test that a stopped timer can be started again."""
        counter = Counter()
        timer = Timer(counter, Millisecond(30), single_shot=True)
        timer.start()
        self.assertTrue(timer.join(1.0))
        timer.start()
        self.assertTrue(timer.join(1.0))
        self.assertEqual(counter.count, 2)
        self.assertEqual(timer.tick_count, 2)

    def test_zero_interval_still_stops(self):
        """Test that a zero interval timer ticks repeatedly and still stops."""
        counter = Counter()
        timer = Timer(counter, 0)
        timer.start()
        time.sleep(0.05)
        timer.stop()
        self.assertTrue(timer.join(1.0))
        ticks = counter.count
        self.assertGreater(ticks, 1)
        time.sleep(0.05)
        self.assertEqual(counter.count, ticks)

    def test_context_manager(self):
        """Test that the with-block starts and stops the timer."""
        counter = Counter()
        with Timer(counter, Millisecond(20)) as timer:
            self.assertTrue(timer.running)
            time.sleep(0.1)
        self.assertFalse(timer.running)
        self.assertTrue(timer.join(1.0))
        self.assertGreater(counter.count, 0)

    def test_collected_timer_stops(self):
        """Test that dropping the last reference stops a continuous timer."""
        counter = Counter()
        timer = Timer(counter, Millisecond(20))
        timer.start()
        time.sleep(0.1)
        del timer
        gc.collect()
        time.sleep(0.1)
        ticks = counter.count
        time.sleep(0.1)
        self.assertEqual(counter.count, ticks)

    def test_collected_single_shot_still_fires(self):
        """Test that a dropped single-shot timer still fires once."""
        counter = Counter()
        Timer(counter, Millisecond(50), single_shot=True, auto_start=True)
        gc.collect()
        time.sleep(0.3)
        self.assertEqual(counter.count, 1)

    def test_restart_during_tick_does_not_overlap(self):
        """Test that stop() then start() during a slow tick never runs two ticks at once."""
        lock = threading.Lock()
        state = {"active": 0, "peak": 0, "calls": 0}

        def slow():
            with lock:
                state["active"] += 1
                state["calls"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.3)
            with lock:
                state["active"] -= 1

        timer = Timer(slow, Millisecond(10))
        timer.start()
        time.sleep(0.1)
        timer.stop()
        timer.start()
        self.assertTrue(timer.running)
        time.sleep(0.6)
        timer.stop()
        self.assertTrue(timer.join(1.0))

        self.assertEqual(state["peak"], 1)
        self.assertGreaterEqual(state["calls"], 2)

    def test_stop_while_waiting_for_previous_run(self):
        """Test that a restarted run stopped before the previous tick ends never ticks."""
        counter = Counter()

        def slow():
            counter()
            time.sleep(0.2)

        timer = Timer(slow, Millisecond(10))
        timer.start()
        time.sleep(0.05)
        timer.stop()
        timer.start()
        timer.stop()
        self.assertTrue(timer.join(1.0))
        time.sleep(0.2)
        self.assertEqual(counter.count, 1)

    def test_thread_name(self):
        """Test that the background thread carries the timer name."""
        seen = []
        timer = Timer(lambda: seen.append(threading.current_thread().name),
                      Millisecond(10), single_shot=True, name="heartbeat")
        timer.start()
        self.assertTrue(timer.join(1.0))
        self.assertEqual(seen, ["heartbeat"])


class TestTimerMutation(unittest.TestCase):
    """Test configuration changes while running."""

    def test_set_function_while_running(self):
        """Test that later ticks call the replacement function."""
        first, second = Counter(), Counter()
        timer = Timer(first, Millisecond(50))
        timer.start()
        try:
            time.sleep(0.13)
            timer.set_function(second)
            first_count = first.count
            time.sleep(0.13)
            self.assertEqual(first.count, first_count)
            self.assertGreater(second.count, 0)
            self.assertIs(timer.function, second)
        finally:
            timer.stop()
            timer.join(1.0)

    def test_function_swaps_from_another_thread(self):
        """Test concurrent swaps: every tick runs exactly one whole function."""
        ticks = []
        lock = threading.Lock()

        def tick_a():
            with lock:
                ticks.append("a")

        def tick_b():
            with lock:
                ticks.append("b")

        timer = Timer(tick_a, Millisecond(1))
        swaps_done = threading.Event()

        def swapper():
            for i in range(200):
                timer.function = tick_b if i % 2 == 0 else tick_a
                time.sleep(0.001)
            swaps_done.set()

        timer.start()
        worker = threading.Thread(target=swapper)
        worker.start()
        worker.join(5.0)
        timer.stop()
        self.assertTrue(timer.join(1.0))

        self.assertTrue(swaps_done.is_set())
        self.assertIsNone(timer.last_error)
        self.assertEqual(len(ticks), timer.tick_count)
        self.assertTrue(set(ticks) <= {"a", "b"})
        self.assertIn("a", ticks)
        self.assertIn("b", ticks)

    def test_set_function_validates(self):
        """Test that replacement functions are validated."""
        timer = Timer(Counter(), Millisecond(10))
        with self.assertRaises(TypeError):
            timer.set_function(None)
        with self.assertRaises(TypeError):
            timer.function = lambda a, b: None

    def test_function_can_replace_itself(self):
        """Test that a tick can replace the timer function without deadlock."""
        calls = []
        timer = Timer(lambda: None, Millisecond(10))

        def second():
            calls.append("second")
            timer.stop()

        def first():
            calls.append("first")
            timer.set_function(second)

        timer.function = first
        timer.start()
        self.assertTrue(timer.join(1.0))
        self.assertEqual(calls, ["first", "second"])

    def test_interval_change_applies_to_next_wait(self):
        """Test that a new interval does not shorten the wait in progress."""
        counter = Counter()
        timer = Timer(counter, Millisecond(300))
        started = time.perf_counter()
        timer.start()
        try:
            time.sleep(0.05)
            timer.interval = Millisecond(50)
            time.sleep(0.45)
            calls = list(counter.calls)
        finally:
            timer.stop()
            timer.join(1.0)

        self.assertGreaterEqual(len(calls), 2)
        self.assertGreaterEqual(calls[0] - started, 0.3 - 0.005)
        self.assertLess(calls[1] - calls[0], 0.2)

    def test_single_shot_switched_on_while_running(self):
        """Test that a continuous timer stops after the next tick when set single-shot."""
        counter = Counter()
        timer = Timer(counter, Millisecond(50))
        timer.start()
        time.sleep(0.12)
        timer.single_shot = True
        self.assertTrue(timer.join(1.0))
        count = counter.count
        time.sleep(0.15)
        self.assertEqual(counter.count, count)
        self.assertFalse(timer.running)

    def test_delay_change_applies_to_next_start(self):
        """Test that the delay is captured when the timer starts."""
        counter = Counter()
        timer = Timer(counter, 0, delay=Millisecond(20), single_shot=True)
        started = time.perf_counter()
        timer.start()
        timer.delay = Second(10)
        self.assertTrue(timer.join(1.0))
        self.assertLess(counter.calls[0] - started, 1.0)
        self.assertEqual(float(timer.delay), 10.0)


class TestTimerErrors(unittest.TestCase):
    """Test handling of exceptions raised by the timer function."""

    def test_exception_stops_timer(self):
        """Test that a raising function is logged, recorded and stops the timer."""
        received = []

        def broken():
            raise ValueError("boom")

        timer = Timer(broken, Millisecond(10), on_error=received.append)
        with self.assertLogs("ticktimer.timer.timer", level="ERROR"):
            timer.start()
            self.assertTrue(timer.join(1.0))

        self.assertFalse(timer.running)
        self.assertIsInstance(timer.last_error, ValueError)
        self.assertEqual(received, [timer.last_error])
        self.assertEqual(timer.tick_count, 0)

    def test_failing_error_handler(self):
        """Test that an error handler failure is logged and contained."""

        def handler(exc):
            raise RuntimeError("handler failed")

        timer = Timer(lambda: 1 / 0, Millisecond(10), on_error=handler)
        with self.assertLogs("ticktimer.timer.timer", level="ERROR") as logs:
            timer.start()
            self.assertTrue(timer.join(1.0))

        self.assertEqual(len(logs.records), 2)
        self.assertIsInstance(timer.last_error, ZeroDivisionError)
        self.assertFalse(timer.running)

    def test_timer_restarts_after_failure(self):
        """Test that a failed timer can be started again."""
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise OSError("first call fails")

        timer = Timer(flaky, Millisecond(10), single_shot=True)
        with self.assertLogs("ticktimer.timer.timer", level="ERROR"):
            timer.start()
            self.assertTrue(timer.join(1.0))
        timer.start()
        self.assertTrue(timer.join(1.0))
        self.assertEqual(len(attempts), 2)
        self.assertEqual(timer.tick_count, 1)

    def test_join_from_own_thread(self):
        """Test that joining from the timer thread is reported as an error."""
        timer = Timer(lambda: None, Millisecond(10), single_shot=True)
        timer.function = lambda: timer.join()
        with self.assertLogs("ticktimer.timer.timer", level="ERROR"):
            timer.start()
            self.assertTrue(timer.join(1.0))
        self.assertIsInstance(timer.last_error, RuntimeError)


class TestTimerDescription(unittest.TestCase):
    """Test the textual rendering."""

    def test_describe(self):
        """Test the multi-line description."""
        timer = Timer(Counter(), Millisecond(500), name="blink")
        self.assertEqual(
            timer.describe(),
            "Timer 'blink'\n"
            "  interval    : 500 ms\n"
            "  delay       : 0 ms\n"
            "  single shot : false",
        )
        self.assertEqual(str(timer), timer.describe())

    def test_describe_units(self):
        """Test that each duration keeps its own unit suffix."""
        timer = Timer(Counter(), Second(2), delay=Millisecond(250), single_shot=True)
        text = timer.describe()
        self.assertIn("interval    : 2 s", text)
        self.assertIn("delay       : 250 ms", text)
        self.assertIn("single shot : true", text)

    def test_describe_keeps_large_values_exact(self):
        """Test that long intervals are not rounded in the description."""
        timer = Timer(Counter(), Millisecond(1234567), delay=Microsecond(1500250))
        text = timer.describe()
        self.assertIn("interval    : 1234567 ms", text)
        self.assertIn("delay       : 1500250 us", text)

    def test_repr(self):
        """Test the one-line representation."""
        timer = Timer(Counter(), Millisecond(20), name="r")
        self.assertEqual(repr(timer), "<Timer 'r' interval=20 ms single_shot=False stopped>")


class TestTimerScenarios(unittest.TestCase):
    """End-to-end scenarios with real second-scale intervals."""

    def test_replace_function_scenario(self):
        """Test two ticks per 2.1 s before and after swapping the function."""
        first, second = Counter(), Counter()
        timer = Timer(first, Millisecond(1000))
        timer.start()
        try:
            time.sleep(2.1)
            self.assertEqual(first.count, 2)
            timer.set_function(second)
            time.sleep(2.1)
            self.assertEqual(first.count, 2)
            self.assertEqual(second.count, 2)
        finally:
            timer.stop()
            timer.join(2.0)

    def test_timer_toggles_other_timer(self):
        """Test one timer switching the function of another on every tick."""
        executed = []
        lock = threading.Lock()
        state = {"use_second": False, "toggles": 0}

        def f1():
            with lock:
                executed.append(("f1", state["toggles"]))

        def f2():
            with lock:
                executed.append(("f2", state["toggles"]))

        fast = Timer(f1, Millisecond(100))

        def toggle():
            with lock:
                state["use_second"] = not state["use_second"]
                state["toggles"] += 1
                fast.set_function(f2 if state["use_second"] else f1)

        # offset so toggles land between fast ticks
        slow = Timer(toggle, Millisecond(200), delay=Millisecond(50))
        fast.start()
        slow.start()
        time.sleep(1.0)
        slow.stop()
        fast.stop()
        self.assertTrue(slow.join(1.0))
        self.assertTrue(fast.join(1.0))

        self.assertGreaterEqual(state["toggles"], 3)
        for name, toggles in executed:
            expected = "f2" if toggles % 2 == 1 else "f1"
            self.assertEqual(name, expected)
        self.assertIn("f1", [name for name, _ in executed])
        self.assertIn("f2", [name for name, _ in executed])


class TestPackageImports(unittest.TestCase):
    """Test that the timer core stays free of the analysis stack."""

    def test_core_import_skips_analysis_libraries(self):
        """Test that importing ticktimer loads neither numpy, pandas nor matplotlib."""
        code = (
            "import sys, ticktimer, ticktimer.unit, ticktimer.timer; "
            "print(sorted(m for m in ('numpy', 'pandas', 'matplotlib') if m in sys.modules))"
        )
        result = subprocess.run(
            [sys.executable, "-c", code], capture_output=True, text=True, check=True
        )
        self.assertEqual(result.stdout.strip(), "[]")


if __name__ == '__main__':
    unittest.main()
