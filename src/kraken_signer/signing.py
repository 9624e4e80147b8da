from __future__ import annotations

import base64
import binascii
import hmac
from hashlib import sha256, sha512

from kraken_signer.errors import ConfigurationError


def decode_secret(secret: str) -> bytes:
    if not secret:
        raise ConfigurationError("API secret is empty")
    try:
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("API secret is not valid base64") from exc


def sign(secret: str, path: str, nonce: str, body_bytes: bytes) -> str:
    """
    Compute the `API-Sign` value for a private request.

    The body is bound by SHA256(nonce + body) and the endpoint by placing the
    path in front of that digest inside an HMAC-SHA512 keyed with the decoded
    secret. The result is the base64 of the 64-byte MAC.
    """
    key = decode_secret(secret)
    inner = sha256(nonce.encode("utf-8") + body_bytes).digest()
    mac = hmac.new(key, path.encode("utf-8") + inner, sha512)
    return base64.b64encode(mac.digest()).decode("ascii")


def verify(signature: str, secret: str, path: str, nonce: str, body_bytes: bytes) -> bool:
    expected = sign(secret, path, nonce, body_bytes)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
