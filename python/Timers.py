import logging

log = logging.getLogger(__name__)


class ScheduledTask:
    __slots__ = ("kind", "deadline", "callback", "cancelled")

    def __init__(self, kind, deadline, callback):
        self.kind = kind
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        state = "cancelled" if self.cancelled else "pending"
        return f"ScheduledTask({self.kind!r}, deadline={self.deadline:.3f}, {state})"


class TimerScheduler:
    """
    Deadline timers keyed by kind, at most one pending task per kind.

    Nothing fires on its own: the owner calls run_due(now) from the thread that
    also processes frames, so timer callbacks never overlap frame handling.
    """

    def __init__(self):
        self._tasks = {}

    def schedule(self, kind, delay, callback, now):
        """(Re)start the `kind` timer; any pending timer of the same kind is cancelled."""
        self.cancel(kind)
        task = ScheduledTask(kind, now + delay, callback)
        self._tasks[kind] = task
        return task

    def cancel(self, kind):
        task = self._tasks.pop(kind, None)
        if task is not None:
            task.cancel()
        return task

    def cancel_all(self):
        for kind in list(self._tasks):
            self.cancel(kind)

    def pending(self, kind):
        return self._tasks.get(kind)

    def next_deadline(self):
        if not self._tasks:
            return None
        return min(t.deadline for t in self._tasks.values())

    def run_due(self, now):
        """Fire every task whose deadline is <= now, earliest first. Returns how many fired."""
        fired = 0
        while True:
            due = [t for t in self._tasks.values() if t.deadline <= now]
            if not due:
                return fired
            task = min(due, key=lambda t: t.deadline)
            # a callback may reschedule its own kind
            del self._tasks[task.kind]
            log.debug("firing %s timer (deadline %.3f)", task.kind, task.deadline)
            task.callback(task.deadline)
            fired += 1

    def __len__(self):
        return len(self._tasks)
