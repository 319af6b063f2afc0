import unittest

from engine.Gesture import GestureGuard, GesturePhase


class TestGestureGuard(unittest.TestCase):
    def test_single_flight(self):
        guard = GestureGuard(timeout=60.0)
        self.assertEqual(GesturePhase.IDLE, guard.phase)
        first = guard.begin("stack1", 0, ["Apple"], now=0.0)
        self.assertEqual(GesturePhase.DRAGGING, guard.phase)
        self.assertIsNone(guard.begin("stack2", 0, ["Red"], now=1.0))
        self.assertIs(first, guard.finish(first.token))
        self.assertEqual(GesturePhase.IDLE, guard.phase)
        second = guard.begin("stack2", 0, ["Red"], now=2.0)
        self.assertNotEqual(first.token, second.token)

    def test_finish_with_wrong_token_keeps_gesture(self):
        guard = GestureGuard()
        session = guard.begin("waste", 3, ["Dog"], now=0.0)
        self.assertIsNone(guard.finish(session.token + 1))
        self.assertEqual(GesturePhase.DRAGGING, guard.phase)
        self.assertIs(session, guard.finish())
        self.assertIsNone(guard.finish())

    def test_timeout_resets_to_idle(self):
        guard = GestureGuard(timeout=5.0)
        guard.begin("stack1", 0, ["Apple"], now=0.0)
        self.assertFalse(guard.expire(4.9))
        with self.assertLogs("engine.Gesture", level="WARNING"):
            self.assertTrue(guard.expire(5.0))
        self.assertEqual(GesturePhase.IDLE, guard.phase)

    def test_begin_after_timeout_replaces_stuck_gesture(self):
        guard = GestureGuard(timeout=5.0)
        guard.begin("stack1", 0, ["Apple"], now=0.0)
        with self.assertLogs("engine.Gesture", level="WARNING"):
            session = guard.begin("stack2", 1, ["Red", "Blue"], now=10.0)
        self.assertEqual(("Red", "Blue"), session.cards)

    def test_cancel(self):
        guard = GestureGuard()
        guard.begin("stack1", 0, ["Apple"], now=0.0)
        guard.cancel()
        self.assertEqual(GesturePhase.IDLE, guard.phase)


if __name__ == "__main__":
    unittest.main()
