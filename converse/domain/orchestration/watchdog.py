from typing import Optional
import asyncio

from converse.infrastructure.observability.logging import ConversationLogger


class CallbackWatchdog:
    """Advisory timer armed while a handler owes us its callback

    Expiry only logs a warning; the handler keeps running and the
    conversation keeps waiting for it.
    """

    def __init__(self, timeout: float, logger: ConversationLogger, action: Optional[str] = None):
        self.timeout = timeout
        self.logger = logger
        self.action = action
        self.fired = False
        self._handle: Optional[asyncio.TimerHandle] = None

    def start(self):
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout, self._expire)

    def _expire(self):
        self.fired = True
        self._handle = None
        self.logger.warn(
            f"I didn't get the callback after {self.timeout} seconds. Did you forget to call me back?",
            action=self.action
        )

    def clear(self) -> bool:
        """Cancel the timer; returns False if there was nothing to cancel"""

        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    @property
    def armed(self) -> bool:
        return self._handle is not None
