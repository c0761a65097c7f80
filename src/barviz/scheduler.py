import asyncio
import logging

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """
    Handle for a callback that fires every `interval` seconds until cancelled.
    """

    def __init__(self, interval, callback, next_due):
        self.interval = interval
        self.callback = callback
        self.next_due = next_due
        self.active = True

    def cancel(self):
        self.active = False


class ManualScheduler:
    """
    Clock advanced explicitly by the host.

    Used when frames are produced on demand (offline rendering, tests):
    the host moves time forward and every tick that fell due in between is
    fired in order on the calling thread.
    """

    def __init__(self, start=0.0):
        self.now = float(start)
        self._timers = []

    def schedule_repeating(self, interval, callback):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        timer = RepeatingTimer(interval, callback, self.now + interval)
        self._timers.append(timer)
        return timer

    def advance(self, seconds):
        self.advance_to(self.now + seconds)

    def advance_to(self, t):
        """Fire every timer due at or before `t`, then set the clock to `t`."""
        if t < self.now:
            # Hosts may ask for an earlier frame (e.g. a preview); time never runs backwards.
            return

        while True:
            due = [timer for timer in self._timers if timer.active and timer.next_due <= t]
            if not due:
                break
            timer = min(due, key=lambda candidate: candidate.next_due)
            self.now = timer.next_due
            timer.next_due += timer.interval
            timer.callback()

        self.now = t
        self._timers = [timer for timer in self._timers if timer.active]

    @property
    def pending(self):
        return sum(1 for timer in self._timers if timer.active)


class _LoopTimer(RepeatingTimer):
    def __init__(self, loop, interval, callback):
        super().__init__(interval, callback, loop.time() + interval)
        self._loop = loop
        self._handle = loop.call_at(self.next_due, self._fire)

    def _fire(self):
        if not self.active:
            return
        self.next_due += self.interval
        self._handle = self._loop.call_at(self.next_due, self._fire)
        self.callback()

    def cancel(self):
        super().cancel()
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    """
    Ticks on an asyncio event loop, for hosts that already run one.
    """

    def __init__(self, loop=None):
        self._loop = loop

    @property
    def loop(self):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def now(self):
        return self.loop.time()

    def schedule_repeating(self, interval, callback):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        logger.debug("Arming asyncio timer every %.3fs", interval)
        return _LoopTimer(self.loop, interval, callback)
