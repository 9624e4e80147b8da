import threading

import pytest

from kraken_signer.errors import ClockError
from kraken_signer.nonce import NonceGenerator


class _FakeClock:
    def __init__(self, readings: list[int]) -> None:
        self._readings = list(readings)
        self._last = readings[-1]

    def __call__(self) -> int:
        if self._readings:
            self._last = self._readings.pop(0)
        return self._last


def test_nonce_is_seconds_followed_by_nine_digit_fraction() -> None:
    gen = NonceGenerator(clock=_FakeClock([1_616_492_376_594_000_000]))
    assert gen.next() == "1616492376594000000"


def test_nonce_pads_sub_second_fraction() -> None:
    gen = NonceGenerator(clock=_FakeClock([1_000_000_005]))
    assert gen.next() == "1000000005"


def test_nonce_strictly_increasing_with_system_clock() -> None:
    gen = NonceGenerator()
    values = [int(gen.next()) for _ in range(1_000)]
    assert all(b > a for a, b in zip(values, values[1:]))


def test_nonce_increments_within_same_clock_tick() -> None:
    gen = NonceGenerator(clock=_FakeClock([1_700_000_000_000_000_000]))
    values = [int(gen.next()) for _ in range(5)]
    assert values == [
        1_700_000_000_000_000_000,
        1_700_000_000_000_000_001,
        1_700_000_000_000_000_002,
        1_700_000_000_000_000_003,
        1_700_000_000_000_000_004,
    ]


def test_nonce_never_regresses_when_clock_goes_backwards() -> None:
    gen = NonceGenerator(
        clock=_FakeClock(
            [
                1_700_000_010_000_000_000,
                1_700_000_000_000_000_000,
                1_700_000_020_000_000_000,
            ]
        )
    )
    first = int(gen.next())
    second = int(gen.next())
    third = int(gen.next())
    assert second == first + 1
    assert third == 1_700_000_020_000_000_000


def test_nonce_unique_and_increasing_across_threads() -> None:
    gen = NonceGenerator(clock=lambda: 1_700_000_000_000_000_000)
    per_thread: list[list[int]] = []
    lock = threading.Lock()

    def worker() -> None:
        local = [int(gen.next()) for _ in range(500)]
        with lock:
            per_thread.append(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    everything = [v for local in per_thread for v in local]
    assert len(everything) == 8 * 500
    assert len(set(everything)) == len(everything)
    for local in per_thread:
        assert all(b > a for a, b in zip(local, local[1:]))


def test_nonce_clock_failure_raises_clock_error() -> None:
    def broken_clock() -> int:
        raise OSError("clock unavailable")

    gen = NonceGenerator(clock=broken_clock)
    with pytest.raises(ClockError):
        gen.next()


def test_nonce_negative_clock_reading_raises_clock_error() -> None:
    gen = NonceGenerator(clock=lambda: -1)
    with pytest.raises(ClockError):
        gen.next()
