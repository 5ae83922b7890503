"""Incremental signing and verification state for JWS algorithms."""

from __future__ import annotations

from enum import Enum

from cryptography.exceptions import InvalidSignature as _BackendInvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from .alg import Signing


class CryptoError(Exception):
    """Base class for signing and verification failures."""


class UnsupportedAlgorithm(CryptoError):
    """Raised when an algorithm is not available."""


class InvalidSignature(CryptoError):
    """Raised when a signature cannot be produced or does not verify."""


class AlgorithmMismatch(CryptoError):
    """Raised when a key cannot be used with the requested algorithm."""


class _Family(Enum):
    HMAC = "hmac"
    ECDSA = "ecdsa"
    PKCS1 = "pkcs1"
    PSS = "pss"


_SPECS = {
    Signing.HS256: (_Family.HMAC, hashes.SHA256),
    Signing.HS384: (_Family.HMAC, hashes.SHA384),
    Signing.HS512: (_Family.HMAC, hashes.SHA512),
    Signing.ES256: (_Family.ECDSA, hashes.SHA256),
    Signing.ES384: (_Family.ECDSA, hashes.SHA384),
    Signing.RS256: (_Family.PKCS1, hashes.SHA256),
    Signing.RS384: (_Family.PKCS1, hashes.SHA384),
    Signing.RS512: (_Family.PKCS1, hashes.SHA512),
    Signing.PS256: (_Family.PSS, hashes.SHA256),
    Signing.PS384: (_Family.PSS, hashes.SHA384),
    Signing.PS512: (_Family.PSS, hashes.SHA512),
}

_CURVES = {
    Signing.ES256: ec.SECP256R1,
    Signing.ES384: ec.SECP384R1,
}

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _resolve(alg):
    try:
        alg = Signing(alg)
    except ValueError:
        raise UnsupportedAlgorithm(f"unknown algorithm: {alg!r}") from None
    try:
        family, hash_cls = _SPECS[alg]
    except KeyError:
        raise UnsupportedAlgorithm(f"unsupported algorithm: {alg.value}") from None
    return alg, family, hash_cls()


def _check_key(alg: Signing, family: _Family, key, private: bool):
    if family is _Family.HMAC:
        if not isinstance(key, _BYTES_LIKE):
            raise AlgorithmMismatch(f"{alg.value} requires a symmetric key")
        return bytes(key)

    if family is _Family.ECDSA:
        if not private and isinstance(key, ec.EllipticCurvePrivateKey):
            key = key.public_key()
        wanted = ec.EllipticCurvePrivateKey if private else ec.EllipticCurvePublicKey
        if not isinstance(key, wanted) or not isinstance(key.curve, _CURVES[alg]):
            raise AlgorithmMismatch(f"key cannot be used with {alg.value}")
        return key

    if not private and isinstance(key, rsa.RSAPrivateKey):
        key = key.public_key()
    wanted = rsa.RSAPrivateKey if private else rsa.RSAPublicKey
    if not isinstance(key, wanted):
        raise AlgorithmMismatch(f"key cannot be used with {alg.value}")
    return key


def _field_size(key) -> int:
    return (key.curve.key_size + 7) // 8


class _State:
    def __init__(self, alg, key, private: bool) -> None:
        self.alg, self._family, self._hash = _resolve(alg)
        self._key = _check_key(self.alg, self._family, key, private)
        if self._family is _Family.HMAC:
            self._ctx = hmac.HMAC(self._key, self._hash)
        else:
            self._ctx = hashes.Hash(self._hash)
        self._done = False

    def _ensure_live(self) -> None:
        if self._done:
            raise RuntimeError("state already finished")

    def update(self, chunk) -> None:
        """Feed more bytes into the state."""
        self._ensure_live()
        if not isinstance(chunk, _BYTES_LIKE):
            raise TypeError("chunk must be bytes-like")
        self._ctx.update(bytes(chunk))

    def _take(self):
        self._ensure_live()
        self._done = True
        return self._ctx

    def _padding(self):
        if self._family is _Family.PSS:
            return padding.PSS(
                mgf=padding.MGF1(self._hash), salt_length=self._hash.digest_size
            )
        return padding.PKCS1v15()


class SigningState(_State):
    """Accumulates input and produces a signature over it."""

    def __init__(self, alg, key) -> None:
        super().__init__(alg, key, private=True)

    def update(self, chunk) -> None:
        """Feed more bytes into the signature."""
        super().update(chunk)

    def finish(self) -> bytes:
        """Return the signature over everything fed so far."""
        ctx = self._take()
        if self._family is _Family.HMAC:
            return ctx.finalize()

        digest = ctx.finalize()
        prehashed = Prehashed(self._hash)
        try:
            if self._family is _Family.ECDSA:
                der = self._key.sign(digest, ec.ECDSA(prehashed))
                r, s = decode_dss_signature(der)
                size = _field_size(self._key)
                return r.to_bytes(size, "big") + s.to_bytes(size, "big")
            return self._key.sign(digest, self._padding(), prehashed)
        except ValueError as exc:
            raise InvalidSignature(f"cannot sign with {self.alg.value}") from exc


class VerifyingState(_State):
    """Accumulates input and checks a signature over it."""

    def __init__(self, alg, key) -> None:
        super().__init__(alg, key, private=False)

    def update(self, chunk) -> None:
        """Feed more bytes into the verification."""
        super().update(chunk)

    def finish(self, signature) -> None:
        """Check ``signature``; raise InvalidSignature if it does not match."""
        ctx = self._take()
        if not isinstance(signature, _BYTES_LIKE):
            raise TypeError("signature must be bytes-like")
        signature = bytes(signature)

        if self._family is _Family.HMAC:
            try:
                ctx.verify(signature)
            except _BackendInvalidSignature:
                raise InvalidSignature("signature does not match") from None
            return

        digest = ctx.finalize()
        prehashed = Prehashed(self._hash)
        try:
            if self._family is _Family.ECDSA:
                size = _field_size(self._key)
                if len(signature) != 2 * size:
                    raise InvalidSignature("signature has the wrong length")
                r = int.from_bytes(signature[:size], "big")
                s = int.from_bytes(signature[size:], "big")
                if r == 0 or s == 0:
                    raise InvalidSignature("signature scalars must be non-zero")
                self._key.verify(
                    encode_dss_signature(r, s), digest, ec.ECDSA(prehashed)
                )
            else:
                self._key.verify(signature, digest, self._padding(), prehashed)
        except (_BackendInvalidSignature, ValueError):
            raise InvalidSignature("signature does not match") from None