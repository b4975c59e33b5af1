from Timers import TimerScheduler


def test_fires_only_when_due():
    sched = TimerScheduler()
    fired = []
    sched.schedule("idle", 3.0, fired.append, now=1.0)
    assert sched.run_due(3.9) == 0
    assert sched.run_due(4.0) == 1
    assert fired == [4.0]
    assert sched.pending("idle") is None


def test_new_timer_supersedes_same_kind():
    sched = TimerScheduler()
    fired = []
    first = sched.schedule("finalize", 1.5, lambda d: fired.append(("old", d)), now=0.0)
    sched.schedule("finalize", 1.5, lambda d: fired.append(("new", d)), now=1.0)
    assert first.cancelled
    sched.run_due(10.0)
    assert fired == [("new", 2.5)]


def test_kinds_are_independent_and_fire_in_deadline_order():
    sched = TimerScheduler()
    order = []
    sched.schedule("idle", 3.0, lambda d: order.append("idle"), now=0.0)
    sched.schedule("finalize", 1.5, lambda d: order.append("finalize"), now=0.0)
    assert sched.next_deadline() == 1.5
    assert sched.run_due(5.0) == 2
    assert order == ["finalize", "idle"]


def test_cancel_all():
    sched = TimerScheduler()
    fired = []
    sched.schedule("idle", 1.0, fired.append, now=0.0)
    sched.schedule("finalize", 1.0, fired.append, now=0.0)
    sched.cancel_all()
    assert len(sched) == 0
    assert sched.run_due(100.0) == 0
    assert fired == []


def test_callback_may_reschedule_itself():
    sched = TimerScheduler()
    fired = []

    def again(deadline):
        fired.append(deadline)
        if len(fired) < 3:
            sched.schedule("tick", 1.0, again, now=deadline)

    sched.schedule("tick", 1.0, again, now=0.0)
    sched.run_due(10.0)
    assert fired == [1.0, 2.0, 3.0]
