from __future__ import annotations

import threading
import time
from collections.abc import Callable

from kraken_signer.errors import ClockError

_NANOS_PER_SECOND = 1_000_000_000

Clock = Callable[[], int]


def _format_clock_reading(reading_ns: int) -> int:
    seconds, nanos = divmod(reading_ns, _NANOS_PER_SECOND)
    return int(f"{seconds}{nanos:09d}")


class NonceGenerator:
    """
    Issues strictly increasing nonces: epoch seconds followed by the 9-digit
    nanosecond fraction. When the clock stalls or steps backwards the last
    issued value is incremented instead.
    """

    def __init__(self, *, clock: Clock = time.time_ns) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> str:
        try:
            reading_ns = int(self._clock())
        except (OSError, ValueError, OverflowError) as exc:
            raise ClockError(f"failed to read clock: {exc}") from exc
        if reading_ns < 0:
            raise ClockError(f"clock returned a negative reading: {reading_ns}")

        candidate = _format_clock_reading(reading_ns)
        with self._lock:
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
        return str(candidate)


_default_generator = NonceGenerator()


def default_generator() -> NonceGenerator:
    return _default_generator
