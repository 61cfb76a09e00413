from typing import Optional

from bubbletrack.utils.constants import RESET_PULSE_MS


class ResetPulse:
    '''One-shot visual pulse shown after a bubble's timer is reset.

    The first value observed is the one the bubble mounted with and does not
    pulse. After that, each new `last_reset_at` arms the pulse for
    `duration_ms`; seeing the same value again does nothing.
    '''

    def __init__(self, duration_ms: int = RESET_PULSE_MS):
        self.duration_ms = duration_ms
        self._seen: Optional[int] = None
        self._mounted = False
        self._armed_at: Optional[int] = None

    def observe(self, last_reset_at: int, now: int) -> bool:
        '''Feed the current value on every render. Returns True if this call armed it.'''
        if not self._mounted:
            self._mounted = True
            self._seen = last_reset_at
            return False
        if last_reset_at == self._seen:
            return False
        self._seen = last_reset_at
        self._armed_at = now
        return True

    def is_active(self, now: int) -> bool:
        if self._armed_at is None:
            return False
        if now - self._armed_at < self.duration_ms:
            return True
        self._armed_at = None
        return False
