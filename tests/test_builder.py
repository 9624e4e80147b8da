import base64
import dataclasses

import pytest

from kraken_signer import builder as builder_module
from kraken_signer.builder import SignedRequestBuilder, build
from kraken_signer.errors import ConfigurationError, EncodingInvariantViolation
from kraken_signer.nonce import NonceGenerator
from kraken_signer.signing import sign
from kraken_signer.types import Credential

_SECRET = base64.b64encode(b"0123456789abcdef0123456789abcdef").decode("ascii")
_CREDENTIAL = Credential(key="public-key", secret=_SECRET)


def _fixed_generator() -> NonceGenerator:
    return NonceGenerator(clock=lambda: 1_616_492_376_594_000_000)


def test_build_balance_request() -> None:
    request = build(_CREDENTIAL, "Balance", {}, generator=_fixed_generator())

    assert request.method == "POST"
    assert request.path == "/0/private/Balance"
    assert request.url == "https://api.kraken.com/0/private/Balance"
    assert request.nonce == "1616492376594000000"
    assert request.body == "nonce=1616492376594000000"
    assert request.headers["API-Key"] == "public-key"
    assert request.headers["API-Sign"] == sign(
        _SECRET,
        "/0/private/Balance",
        "1616492376594000000",
        b"nonce=1616492376594000000",
    )


def test_build_signature_reproducible_from_returned_body() -> None:
    request = build(
        _CREDENTIAL,
        "AddOrder",
        {"pair": "SOLUSD", "type": "buy", "ordertype": "limit", "price": "154.00", "volume": "2"},
    )
    resigned = sign(_SECRET, request.path, request.nonce, request.body.encode("utf-8"))
    assert resigned == request.signature
    assert request.body.startswith(f"nonce={request.nonce}&ordertype=limit")


def test_build_does_not_mutate_caller_params() -> None:
    params = {"pair": "DOTUSD"}
    build(_CREDENTIAL, "AddOrder", params)
    assert params == {"pair": "DOTUSD"}


def test_build_rejects_caller_supplied_nonce() -> None:
    with pytest.raises(ValueError):
        build(_CREDENTIAL, "Balance", {"nonce": "1"})


def test_build_rejects_empty_method_name() -> None:
    with pytest.raises(ValueError):
        build(_CREDENTIAL, "", {})


def test_build_surfaces_malformed_secret() -> None:
    with pytest.raises(ConfigurationError):
        build(Credential(key="k", secret="%%%"), "Balance", {})


def test_build_uses_custom_host() -> None:
    request = build(_CREDENTIAL, "Balance", {}, host="http://localhost:8080/")
    assert request.url == "http://localhost:8080/0/private/Balance"


def test_signed_request_is_immutable() -> None:
    request = build(_CREDENTIAL, "Balance", {})
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.body = "nonce=0"  # type: ignore[misc]
    with pytest.raises(TypeError):
        request.headers["API-Sign"] = "forged"  # type: ignore[index]


def test_credential_repr_hides_secret() -> None:
    assert _SECRET not in repr(_CREDENTIAL)


def test_builder_issues_increasing_nonces() -> None:
    builder = SignedRequestBuilder(credential=_CREDENTIAL, generator=_fixed_generator())
    nonces = [int(builder.build("Balance").nonce) for _ in range(10)]
    assert all(b > a for a, b in zip(nonces, nonces[1:]))


def test_build_raises_when_signed_bytes_differ_from_body(monkeypatch: pytest.MonkeyPatch) -> None:
    def skewed_encode(params):  # type: ignore[no-untyped-def]
        body = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
        return body, (body + "&").encode("utf-8")

    monkeypatch.setattr(builder_module, "encode", skewed_encode)
    with pytest.raises(EncodingInvariantViolation):
        build(_CREDENTIAL, "Balance", {"asset": "XBT"}, generator=_fixed_generator())


def test_build_raises_when_nonce_missing_from_body(monkeypatch: pytest.MonkeyPatch) -> None:
    def nonce_dropping_encode(params):  # type: ignore[no-untyped-def]
        body = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if k != "nonce")
        return body, body.encode("utf-8")

    monkeypatch.setattr(builder_module, "encode", nonce_dropping_encode)
    with pytest.raises(EncodingInvariantViolation):
        build(_CREDENTIAL, "Balance", {"asset": "XBT"}, generator=_fixed_generator())
