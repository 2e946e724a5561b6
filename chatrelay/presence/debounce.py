"""
Sending-side typing debounce.

The first keystroke after an idle period emits ``typing: true``. Every
keystroke restarts a fixed idle timer; when it fires, ``typing: false`` is
emitted once. Sending a message cancels the timer and emits ``false``
right away, so recipients clear the indicator together with the message.
"""

import asyncio
from collections.abc import Callable

from chatrelay.constants import TYPING_DEBOUNCE_SECONDS
from chatrelay.protocols import TimerHandle, TimerScheduler


def _loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class TypingDebouncer:
    """
    Decides when the local participant's typing state is emitted.

    ``typing: true`` is emitted on the idle-to-active transition only;
    keystrokes inside an active period just restart the timer.

    Args:
        emit: Called with the typing state to send.
        delay: Idle window in seconds.
        schedule: Timer source. Defaults to ``call_later`` on the running
            asyncio loop, so the default requires a running loop.
    """

    def __init__(
        self,
        emit: Callable[[bool], None],
        *,
        delay: float = TYPING_DEBOUNCE_SECONDS,
        schedule: TimerScheduler | None = None,
    ) -> None:
        self._emit = emit
        self.delay = delay
        self._schedule = schedule or _loop_scheduler
        self._timer: TimerHandle | None = None
        self._active = False

    @property
    def active(self) -> bool:
        """Whether ``true`` was emitted and ``false`` has not followed yet."""
        return self._active

    @property
    def pending(self) -> bool:
        """Whether the idle timer is running."""
        return self._timer is not None

    def keystroke(self) -> None:
        """Registers a keystroke in the message input."""
        if not self._active:
            self._active = True
            self._emit(True)
        self._cancel_timer()
        self._timer = self._schedule(self.delay, self._on_idle)

    def message_sent(self) -> None:
        """
        Registers that a message is about to be sent.

        Cancels the idle timer and emits ``false`` immediately, even when no
        keystroke preceded the message.
        """
        self._cancel_timer()
        self._active = False
        self._emit(False)

    def cancel(self) -> None:
        """Stops the idle timer without emitting anything."""
        self._cancel_timer()
        self._active = False

    def _on_idle(self) -> None:
        self._timer = None
        if self._active:
            self._active = False
            self._emit(False)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
