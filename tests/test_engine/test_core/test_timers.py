from eonengine.core.timers import TimerQueue


def test_fires_when_due():
    timers = TimerQueue()
    fired = []
    timers.schedule(1000, lambda: fired.append("a"))

    assert timers.advance(999) == 0
    assert fired == []

    assert timers.advance(1) == 1
    assert fired == ["a"]
    assert timers.pending == 0


def test_fires_in_due_then_schedule_order():
    timers = TimerQueue()
    fired = []
    timers.schedule(500, lambda: fired.append("late"))
    timers.schedule(100, lambda: fired.append("first"))
    timers.schedule(100, lambda: fired.append("second"))

    timers.advance(1000)

    assert fired == ["first", "second", "late"]


def test_clock_accumulates():
    timers = TimerQueue()
    timers.advance(250)
    timers.advance(250)

    assert timers.now == 500


def test_failing_callback_does_not_stop_queue():
    timers = TimerQueue()
    fired = []

    def broken():
        raise ValueError("gone")

    timers.schedule(10, broken)
    timers.schedule(20, lambda: fired.append("ok"))

    assert timers.advance(100) == 2
    assert fired == ["ok"]
