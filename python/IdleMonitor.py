import logging

from helpers import section

log = logging.getLogger(__name__)

IDLE_TIMER = "idle"


class IdleMonitor:
    """
    Flags the session idle after `idle_timeout` seconds without a hand in view.
    touch() is called for every frame that contains a hand, matched or not.
    """

    def __init__(self, scheduler, cfg=None, on_idle=None):
        self.scheduler = scheduler
        self.on_idle = on_idle
        self.is_idle = True
        self.update_config(cfg)

    def update_config(self, cfg):
        self.idle_timeout = float(section(cfg, "idle")["idle_timeout"])

    def touch(self, now):
        self.is_idle = False
        self.scheduler.schedule(IDLE_TIMER, self.idle_timeout, self._fire, now)

    def _fire(self, deadline):
        log.info("No hand for %.1fs, session idle", self.idle_timeout)
        self.is_idle = True
        if self.on_idle is not None:
            self.on_idle(deadline)

    def cancel(self):
        self.scheduler.cancel(IDLE_TIMER)

    def reset(self):
        self.cancel()
        self.is_idle = True
