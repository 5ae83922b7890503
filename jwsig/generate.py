"""Generation of fresh keys as JWK objects."""

from __future__ import annotations

import secrets
from collections.abc import Mapping
from enum import Enum

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .alg import Signing
from .b64 import encode_urlsafe
from .state import UnsupportedAlgorithm


class EcCurve(str, Enum):
    """Elliptic curves registered for JWK ``EC`` keys."""

    P256 = "P-256"
    P384 = "P-384"
    P521 = "P-521"
    SECP256K1 = "secp256k1"


_EC_BACKENDS = {
    EcCurve.P256: ec.SECP256R1,
    EcCurve.P384: ec.SECP384R1,
}

_RSA_EXPONENT = 65537

# What each algorithm generates: ("oct", bytes), ("EC", curve) or ("RSA", bits).
_FOR_ALGORITHM = {
    Signing.ES256: ("EC", EcCurve.P256),
    Signing.ES384: ("EC", EcCurve.P384),
    Signing.HS256: ("oct", 16),
    Signing.HS384: ("oct", 24),
    Signing.HS512: ("oct", 32),
    Signing.RS256: ("RSA", 2048),
    Signing.RS384: ("RSA", 3072),
    Signing.RS512: ("RSA", 4096),
    Signing.PS256: ("RSA", 2048),
    Signing.PS384: ("RSA", 3072),
    Signing.PS512: ("RSA", 4096),
}


def _uint(value: int) -> str:
    size = max(1, (value.bit_length() + 7) // 8)
    return encode_urlsafe(value.to_bytes(size, "big"))


def _fixed(value: int, size: int) -> str:
    return encode_urlsafe(value.to_bytes(size, "big"))


def generate_oct(nbytes) -> dict:
    """Return a symmetric JWK holding ``nbytes`` random bytes."""
    if nbytes < 0:
        raise ValueError("key size must not be negative")
    return {"kty": "oct", "k": encode_urlsafe(secrets.token_bytes(nbytes))}


def generate_ec(curve) -> dict:
    """Return a private EC JWK on ``curve``."""
    try:
        curve = EcCurve(curve)
    except ValueError:
        raise UnsupportedAlgorithm(f"unknown curve: {curve!r}") from None
    backend = _EC_BACKENDS.get(curve)
    if backend is None:
        raise UnsupportedAlgorithm(f"unsupported curve: {curve.value}")

    key = ec.generate_private_key(backend())
    size = (key.curve.key_size + 7) // 8
    numbers = key.private_numbers()
    public = numbers.public_numbers
    return {
        "kty": "EC",
        "crv": curve.value,
        "x": _fixed(public.x, size),
        "y": _fixed(public.y, size),
        "d": _fixed(numbers.private_value, size),
    }


def generate_rsa(bits) -> dict:
    """Return a private RSA JWK with a ``bits``-bit modulus."""
    key = rsa.generate_private_key(public_exponent=_RSA_EXPONENT, key_size=bits)
    numbers = key.private_numbers()
    public = numbers.public_numbers
    return {
        "kty": "RSA",
        "n": _uint(public.n),
        "e": _uint(public.e),
        "d": _uint(numbers.d),
        "p": _uint(numbers.p),
        "q": _uint(numbers.q),
        "dp": _uint(numbers.dmp1),
        "dq": _uint(numbers.dmq1),
        "qi": _uint(numbers.iqmp),
    }


def generate_for(alg) -> dict:
    """Return a JWK suited to ``alg``.

    ``alg`` is an algorithm, or a mapping of JWK parameters whose ``alg``
    member names one; the other parameters are kept in the result.
    """
    if isinstance(alg, Mapping):
        params = dict(alg)
        name = params.get("alg")
    else:
        params = {}
        name = alg
    if name is None:
        raise UnsupportedAlgorithm("no algorithm given")
    try:
        signing = Signing(name)
    except ValueError:
        raise UnsupportedAlgorithm(f"unsupported algorithm: {name!r}") from None
    spec = _FOR_ALGORITHM.get(signing)
    if spec is None:
        raise UnsupportedAlgorithm(f"unsupported algorithm: {signing.value}")

    kty, arg = spec
    if kty == "oct":
        material = generate_oct(arg)
    elif kty == "EC":
        material = generate_ec(arg)
    else:
        material = generate_rsa(arg)
    params["alg"] = signing.value
    return {**params, **material}