from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from kraken_signer.encoding import encode
from kraken_signer.errors import EncodingInvariantViolation
from kraken_signer.nonce import NonceGenerator, default_generator
from kraken_signer.signing import sign
from kraken_signer.types import Credential

API_HOST = "https://api.kraken.com"
PRIVATE_PATH_PREFIX = "/0/private/"
API_KEY_HEADER = "API-Key"
API_SIGN_HEADER = "API-Sign"
NONCE_PARAM = "nonce"


@dataclass(frozen=True)
class SignedRequest:
    url: str
    path: str
    nonce: str
    body: str
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "POST"

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def signature(self) -> str:
        return self.headers[API_SIGN_HEADER]


def private_path(method_name: str) -> str:
    if not method_name:
        raise ValueError("method_name must not be empty")
    return f"{PRIVATE_PATH_PREFIX}{method_name}"


def build(
    credential: Credential,
    method_name: str,
    params: Mapping[str, Any],
    *,
    generator: NonceGenerator | None = None,
    host: str = API_HOST,
) -> SignedRequest:
    if NONCE_PARAM in params:
        raise ValueError("nonce is generated per request and must not be supplied")
    path = private_path(method_name)
    nonce = (generator or default_generator()).next()

    params_with_nonce = dict(params)
    params_with_nonce[NONCE_PARAM] = nonce
    body, body_bytes = encode(params_with_nonce)
    signature = sign(credential.secret, path, nonce, body_bytes)

    if body.encode("utf-8") != body_bytes:
        raise EncodingInvariantViolation("encoded body differs from signed bytes")
    if f"{NONCE_PARAM}={nonce}" not in body.split("&"):
        raise EncodingInvariantViolation(f"nonce {nonce} missing from signed body")

    return SignedRequest(
        url=f"{host.rstrip('/')}{path}",
        path=path,
        nonce=nonce,
        body=body,
        headers={API_KEY_HEADER: credential.key, API_SIGN_HEADER: signature},
    )


class SignedRequestBuilder:
    def __init__(
        self,
        *,
        credential: Credential,
        generator: NonceGenerator | None = None,
        host: str = API_HOST,
    ) -> None:
        self._credential = credential
        self._generator = generator or default_generator()
        self._host = host

    def build(self, method_name: str, params: Mapping[str, Any] | None = None) -> SignedRequest:
        return build(
            self._credential,
            method_name,
            params or {},
            generator=self._generator,
            host=self._host,
        )
