"""Signing and verifying keys for the supported JWS algorithm families."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .alg import Signing
from .b64 import DecodeError, decode_urlsafe
from .state import SigningState, UnsupportedAlgorithm, VerifyingState

_BYTES_LIKE = (bytes, bytearray, memoryview)


class KeyKind(Enum):
    """The kind of key material a key holds."""

    OCT = "oct"
    P256 = "P-256"
    P384 = "P-384"
    RSA = "RSA"


_CURVE_KINDS = {
    "secp256r1": KeyKind.P256,
    "secp384r1": KeyKind.P384,
}

_JWK_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
}

_EC_ALGORITHMS = {
    KeyKind.P256: Signing.ES256,
    KeyKind.P384: Signing.ES384,
}

# Minimum key strength, in bytes, that each algorithm requires.
_HMAC_STRENGTH = {
    Signing.HS256: 16,
    Signing.HS384: 24,
    Signing.HS512: 32,
}

_RSA_STRENGTH = {
    Signing.RS256: 16,
    Signing.PS256: 16,
    Signing.RS384: 24,
    Signing.PS384: 24,
    Signing.RS512: 32,
    Signing.PS512: 32,
}

_EC_STRENGTH = 16


def _pin(alg):
    if alg is None:
        return None
    if isinstance(alg, Signing):
        return alg
    if not isinstance(alg, str):
        raise TypeError("alg must be a string or a Signing algorithm")
    try:
        return Signing(alg)
    except ValueError:
        # A registered algorithm that is not a signing algorithm: the key
        # is then usable with no signing algorithm at all.
        return alg


def _bytes_member(jwk: Mapping, name: str) -> bytes:
    value = jwk.get(name)
    if not isinstance(value, str):
        raise ValueError(f"JWK member {name!r} must be a base64url string")
    try:
        return decode_urlsafe(value)
    except DecodeError as exc:
        raise ValueError(f"JWK member {name!r}: {exc}") from exc


def _int_member(jwk: Mapping, name: str) -> int:
    return int.from_bytes(_bytes_member(jwk, name), "big")


def _ec_from_jwk(jwk: Mapping, private: bool):
    curve_cls = _JWK_CURVES.get(jwk.get("crv"))
    if curve_cls is None:
        raise UnsupportedAlgorithm(f"unsupported curve: {jwk.get('crv')!r}")
    curve = curve_cls()
    size = (curve.key_size + 7) // 8

    def coordinate(name: str) -> int:
        raw = _bytes_member(jwk, name)
        if len(raw) != size:
            raise ValueError(f"JWK member {name!r} must hold {size} bytes")
        return int.from_bytes(raw, "big")

    public = ec.EllipticCurvePublicNumbers(coordinate("x"), coordinate("y"), curve)
    try:
        if private:
            if "d" not in jwk:
                raise ValueError("EC JWK has no private part")
            return ec.EllipticCurvePrivateNumbers(
                coordinate("d"), public
            ).private_key()
        return public.public_key()
    except ValueError as exc:
        raise ValueError(f"invalid EC key: {exc}") from exc


def _rsa_from_jwk(jwk: Mapping, private: bool):
    public = rsa.RSAPublicNumbers(_int_member(jwk, "e"), _int_member(jwk, "n"))
    try:
        if not private:
            return public.public_key()
        if "d" not in jwk:
            raise ValueError("RSA JWK has no private part")
        d = _int_member(jwk, "d")
        if "p" in jwk and "q" in jwk:
            p, q = _int_member(jwk, "p"), _int_member(jwk, "q")
        else:
            p, q = rsa.rsa_recover_prime_factors(public.n, public.e, d)
        dmp1 = _int_member(jwk, "dp") if "dp" in jwk else rsa.rsa_crt_dmp1(d, p)
        dmq1 = _int_member(jwk, "dq") if "dq" in jwk else rsa.rsa_crt_dmq1(d, q)
        iqmp = _int_member(jwk, "qi") if "qi" in jwk else rsa.rsa_crt_iqmp(p, q)
        return rsa.RSAPrivateNumbers(p, q, d, dmp1, dmq1, iqmp, public).private_key()
    except ValueError as exc:
        raise ValueError(f"invalid RSA key: {exc}") from exc


def _material_from_jwk(jwk, private: bool):
    if not isinstance(jwk, Mapping):
        raise ValueError("JWK must be a JSON object")
    kty = jwk.get("kty")
    if kty == "oct":
        return _bytes_member(jwk, "k")
    if kty == "EC":
        return _ec_from_jwk(jwk, private)
    if kty == "RSA":
        return _rsa_from_jwk(jwk, private)
    raise UnsupportedAlgorithm(f"unsupported key type: {kty!r}")


def _alg_from_jwk(jwk: Mapping):
    alg = jwk.get("alg")
    if alg is not None and not isinstance(alg, str):
        raise ValueError("JWK member 'alg' must be a string")
    return alg


class _Key:
    _private = False

    def __init__(self, material, alg=None) -> None:
        self._kind, self._material = self._classify(material)
        self._alg = _pin(alg)

    @classmethod
    def _classify(cls, material):
        raise NotImplementedError

    @staticmethod
    def _curve_kind(key) -> KeyKind:
        kind = _CURVE_KINDS.get(key.curve.name)
        if kind is None:
            raise UnsupportedAlgorithm(f"unsupported curve: {key.curve.name}")
        return kind

    @property
    def kind(self) -> KeyKind:
        """The kind of key material."""
        return self._kind

    @property
    def alg(self):
        """The algorithm this key is restricted to, if any."""
        return self._alg

    @property
    def material(self):
        """The underlying key: bytes or a cryptography key object."""
        return self._material

    def strength(self) -> int:
        """Return the key's strength in bytes."""
        if self._kind is KeyKind.OCT:
            return len(self._material)
        if self._kind is KeyKind.RSA:
            return self._material.key_size // 128
        return _EC_STRENGTH

    def is_supported(self, alg) -> bool:
        """Tell whether this key can be used with ``alg``."""
        try:
            wanted = Signing(alg)
        except ValueError:
            return False
        if self._alg is not None and self._alg != wanted:
            return False
        if self._kind is KeyKind.OCT:
            needed = _HMAC_STRENGTH.get(wanted)
        elif self._kind is KeyKind.RSA:
            needed = _RSA_STRENGTH.get(wanted)
        else:
            return _EC_ALGORITHMS[self._kind] is wanted
        return needed is not None and self.strength() >= needed

    def _require(self, alg) -> Signing:
        if not self.is_supported(alg):
            raise UnsupportedAlgorithm(f"key does not support {alg!s}")
        return Signing(alg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self._kind}, alg={self._alg!r})"


class SigningKey(_Key):
    """A key that creates signatures."""

    _private = True

    @classmethod
    def _classify(cls, material):
        if isinstance(material, _BYTES_LIKE):
            return KeyKind.OCT, bytes(material)
        if isinstance(material, ec.EllipticCurvePrivateKey):
            return cls._curve_kind(material), material
        if isinstance(material, rsa.RSAPrivateKey):
            return KeyKind.RSA, material
        raise TypeError(f"cannot sign with {type(material).__name__}")

    def strength(self) -> int:
        """Return the key's strength in bytes."""
        return super().strength()

    def is_supported(self, alg) -> bool:
        """Tell whether this key can sign with ``alg``."""
        return super().is_supported(alg)

    def sign(self, alg) -> SigningState:
        """Begin a signature with ``alg``."""
        return SigningState(self._require(alg), self._material)

    def verifying_key(self) -> VerifyingKey:
        """Return the matching verifying key, keeping the algorithm pin."""
        if self._kind is KeyKind.OCT:
            public = self._material
        else:
            public = self._material.public_key()
        return VerifyingKey(public, self._alg)

    @classmethod
    def from_jwk(cls, jwk) -> SigningKey:
        """Build a signing key from a JWK object holding private material."""
        return cls(_material_from_jwk(jwk, private=True), _alg_from_jwk(jwk))


class VerifyingKey(_Key):
    """A key that checks signatures."""

    @classmethod
    def _classify(cls, material):
        if isinstance(material, _BYTES_LIKE):
            return KeyKind.OCT, bytes(material)
        if isinstance(material, ec.EllipticCurvePublicKey):
            return cls._curve_kind(material), material
        if isinstance(material, rsa.RSAPublicKey):
            return KeyKind.RSA, material
        raise TypeError(f"cannot verify with {type(material).__name__}")

    def strength(self) -> int:
        """Return the key's strength in bytes."""
        return super().strength()

    def is_supported(self, alg) -> bool:
        """Tell whether this key can verify ``alg`` signatures."""
        return super().is_supported(alg)

    def verify(self, alg) -> VerifyingState:
        """Begin checking a signature made with ``alg``."""
        return VerifyingState(self._require(alg), self._material)

    @classmethod
    def from_jwk(cls, jwk) -> VerifyingKey:
        """Build a verifying key from the public part of a JWK object."""
        return cls(_material_from_jwk(jwk, private=False), _alg_from_jwk(jwk))