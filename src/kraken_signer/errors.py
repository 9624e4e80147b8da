from __future__ import annotations


class KrakenSignerError(Exception):
    pass


class ConfigurationError(KrakenSignerError):
    """Missing or malformed credential material."""


class ClockError(KrakenSignerError):
    """The system clock could not be read."""


class EncodingInvariantViolation(KrakenSignerError, AssertionError):
    """The bytes about to be sent differ from the bytes that were signed."""
