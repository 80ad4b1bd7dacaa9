import pytest

from tiltboard.services.session.timers import ManualScheduler


def test_manual_scheduler_fires_in_deadline_order():
    scheduler = ManualScheduler()
    fired = []
    scheduler.after(0.5, lambda: fired.append('late'))
    scheduler.every(0.2, lambda: fired.append('tick'))
    scheduler.after(0.1, lambda: fired.append('early'))

    scheduler.advance(0.45)
    assert fired == ['early', 'tick', 'tick']
    scheduler.advance(0.1)
    assert fired == ['early', 'tick', 'tick', 'late']
    assert scheduler.now == pytest.approx(0.55)


def test_cancelled_handles_never_fire():
    scheduler = ManualScheduler()
    fired = []
    tick = scheduler.every(0.1, lambda: fired.append('tick'))
    once = scheduler.after(0.1, lambda: fired.append('once'))
    once.cancel()

    scheduler.advance(0.25)
    tick.cancel()
    scheduler.advance(1)
    assert fired == ['tick', 'tick']
    assert scheduler.pending == []


def test_callback_can_cancel_itself():
    scheduler = ManualScheduler()
    fired = []
    handle = None

    def _tick():
        fired.append(scheduler.now)
        if len(fired) == 3:
            handle.cancel()

    handle = scheduler.every(1, _tick)
    scheduler.advance(10)
    assert fired == [1, 2, 3]
