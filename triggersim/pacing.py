"""Step pacing for the engine's run loop.

After popping an event the engine hands the rest of the step (delivering the
pulse to triggers and moving on) to a pacer. The pacer decides when that
happens in wall-clock terms; it never changes logical event order.

Every pacer implements ``schedule(callback) -> handle`` where the handle has
``cancel()``. Cancelling a handle before it runs guarantees the callback is
never invoked.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable, Deque, Optional

# Wall-clock pause per processed event when pacing for display, in seconds.
DEFAULT_STEP_INTERVAL = 0.7


class PacedCall:
    """Handle for a step waiting on a pacer."""

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        if self.cancelled or self.done:
            return
        self.done = True
        self._callback()


class Pacer:
    """Base class for step schedulers. Override `schedule` in subclasses."""

    def schedule(self, callback: Callable[[], None]):
        raise NotImplementedError


class ImmediatePacer(Pacer):
    """Run every step synchronously, inside the call that started the run.

    Steps are queued and drained in a loop, so a step that schedules the next
    one does not recurse. A run of any length completes before the initiating
    call returns.
    """

    def __init__(self):
        self._ready: Deque[PacedCall] = deque()
        self._draining = False

    def schedule(self, callback: Callable[[], None]) -> PacedCall:
        call = PacedCall(callback)
        self._ready.append(call)
        if not self._draining:
            self._draining = True
            try:
                while self._ready:
                    self._ready.popleft().run()
            finally:
                self._draining = False
                # Left over only when a step raised.
                self._ready.clear()
        return call


class ManualPacer(Pacer):
    """Hold each step until `advance()` is called.

    Useful in tests and step-through debuggers: between `advance()` calls the
    engine sits in its running state with the popped event not yet delivered.
    """

    def __init__(self):
        self._pending: Deque[PacedCall] = deque()

    def schedule(self, callback: Callable[[], None]) -> PacedCall:
        call = PacedCall(callback)
        self._pending.append(call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for call in self._pending if not call.cancelled)

    def advance(self) -> bool:
        """Run the next live step. Returns False if nothing was waiting."""
        while self._pending:
            call = self._pending.popleft()
            if call.cancelled:
                continue
            call.run()
            return True
        return False

    def drain(self, max_steps: Optional[int] = None) -> int:
        """Advance until nothing is pending and return the number of steps run."""
        steps = 0
        while max_steps is None or steps < max_steps:
            if not self.advance():
                break
            steps += 1
        return steps


class AsyncioPacer(Pacer):
    """Pace steps on an asyncio event loop with `loop.call_later`.

    All steps run on the loop's thread, one at a time. The returned handle is
    the loop's TimerHandle, so cancelling it revokes the wake-up.
    """

    def __init__(self, interval: float = DEFAULT_STEP_INTERVAL, loop: Optional[asyncio.AbstractEventLoop] = None):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._loop = loop

    def schedule(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, callback)
