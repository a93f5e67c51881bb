import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler(unittest.TestCase):
    def test_fires_in_due_order_then_insertion_order(self):
        s = ManualScheduler()
        fired = []
        s.call_later(1000, fired.append, "b")
        s.call_later(500, fired.append, "a")
        s.call_later(1000, fired.append, "c")
        self.assertEqual(s.advance(999), 1)
        self.assertEqual(fired, ["a"])
        self.assertEqual(s.advance(1), 2)
        self.assertEqual(fired, ["a", "b", "c"])
        self.assertEqual(s.now, 1000)

    def test_clock_reflects_timer_while_firing(self):
        s = ManualScheduler()
        seen = []
        s.call_later(300, lambda: seen.append(s.now))
        s.advance(1000)
        self.assertEqual(seen, [300])
        self.assertEqual(s.now, 1000)

    def test_cancelled_timers_never_fire(self):
        s = ManualScheduler()
        fired = []
        t = s.call_later(10, fired.append, 1)
        s.call_later(20, fired.append, 2)
        t.cancel()
        self.assertEqual(s.pending, 1)
        self.assertEqual(s.run_all(), 1)
        self.assertEqual(fired, [2])

    def test_timers_scheduled_while_firing(self):
        s = ManualScheduler()
        fired = []

        def first():
            fired.append("first")
            s.call_later(100, fired.append, "nested")

        s.call_later(100, first)
        s.advance(150)
        self.assertEqual(fired, ["first"])
        s.advance(50)
        self.assertEqual(fired, ["first", "nested"])
        self.assertEqual(s.pending, 0)


class TestAsyncioScheduler(unittest.IsolatedAsyncioTestCase):
    async def test_drain_waits_for_all_timers(self):
        s = AsyncioScheduler()
        fired = []
        s.call_later(20, fired.append, "late")
        s.call_later(5, fired.append, "early")
        self.assertEqual(s.pending, 2)
        await s.drain()
        self.assertEqual(fired, ["early", "late"])
        self.assertEqual(s.pending, 0)

    async def test_cancel_releases_drain(self):
        s = AsyncioScheduler()
        fired = []
        t = s.call_later(60_000, fired.append, "never")
        s.call_later(5, t.cancel)
        await s.drain()
        self.assertEqual(fired, [])

    async def test_close_cancels_pending(self):
        s = AsyncioScheduler()
        s.call_later(60_000, print)
        s.close()
        self.assertEqual(s.pending, 0)
        await s.drain()


if __name__ == "__main__":
    unittest.main()
