__all__ = [
    "ClockError",
    "ConfigurationError",
    "Credential",
    "EncodingInvariantViolation",
    "KrakenSignerError",
    "NonceGenerator",
    "SignedRequest",
    "SignedRequestBuilder",
    "build",
    "encode",
    "sign",
    "verify",
]

from kraken_signer.builder import SignedRequest, SignedRequestBuilder, build
from kraken_signer.encoding import encode
from kraken_signer.errors import (
    ClockError,
    ConfigurationError,
    EncodingInvariantViolation,
    KrakenSignerError,
)
from kraken_signer.nonce import NonceGenerator
from kraken_signer.signing import sign, verify
from kraken_signer.types import Credential
