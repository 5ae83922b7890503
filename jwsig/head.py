"""JWS protected and unprotected header parameters."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from .alg import Signing
from .b64 import (
    DecodeError,
    decode_standard,
    decode_urlsafe,
    encode_standard,
    encode_urlsafe,
)

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_SHA1_SIZE = 20
_SHA256_SIZE = 32


def _require_mapping(data) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError("header must be a JSON object")
    return data


def _opt_str(data: Mapping, key: str):
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"{key!r} must be a string")


def _opt_url(data: Mapping, key: str):
    value = _opt_str(data, key)
    if value is not None and not _SCHEME.match(value):
        raise ValueError(f"{key!r} must be an absolute URL")
    return value


def _decode(value, key: str, decode, size=None) -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a base64 string")
    try:
        raw = decode(value)
    except DecodeError as exc:
        raise ValueError(f"{key!r}: {exc}") from exc
    if size is not None and len(raw) != size:
        raise ValueError(f"{key!r} must hold {size} bytes")
    return raw


def _opt_bytes(data: Mapping, key: str, size=None):
    value = data.get(key)
    if value is None:
        return None
    return _decode(value, key, decode_urlsafe, size)


def _opt_str_list(data: Mapping, key: str):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key!r} must be a list of strings")
    return list(value)


@dataclass
class Unprotected:
    """Header parameters that may appear outside the integrity protection."""

    alg: Signing | None = None
    jku: str | None = None
    jwk: dict | None = None
    kid: str | None = None
    x5u: str | None = None
    x5c: list[bytes] | None = None
    x5t: bytes | None = None
    x5t_s256: bytes | None = None
    typ: str | None = None
    cty: str | None = None

    def to_dict(self) -> dict:
        """Return the JSON object form, omitting absent parameters."""
        out: dict = {}
        if self.alg is not None:
            out["alg"] = Signing(self.alg).value
        if self.jku is not None:
            out["jku"] = self.jku
        if self.jwk is not None:
            out["jwk"] = dict(self.jwk)
        if self.kid is not None:
            out["kid"] = self.kid
        if self.x5u is not None:
            out["x5u"] = self.x5u
        if self.x5c is not None:
            out["x5c"] = [encode_standard(cert) for cert in self.x5c]
        if self.x5t is not None:
            out["x5t"] = encode_urlsafe(self.x5t)
        if self.x5t_s256 is not None:
            out["x5t#S256"] = encode_urlsafe(self.x5t_s256)
        if self.typ is not None:
            out["typ"] = self.typ
        if self.cty is not None:
            out["cty"] = self.cty
        return out

    @classmethod
    def from_dict(cls, data) -> Unprotected:
        """Build from a JSON object; unknown parameters are ignored."""
        data = _require_mapping(data)

        alg = data.get("alg")
        if alg is not None:
            alg = Signing.from_name(alg)

        jwk = data.get("jwk")
        if jwk is not None:
            if not isinstance(jwk, Mapping):
                raise ValueError("'jwk' must be a JSON object")
            jwk = dict(jwk)

        x5c = data.get("x5c")
        if x5c is not None:
            if not isinstance(x5c, list):
                raise ValueError("'x5c' must be a list")
            x5c = [_decode(cert, "x5c", decode_standard) for cert in x5c]

        return cls(
            alg=alg,
            jku=_opt_url(data, "jku"),
            jwk=jwk,
            kid=_opt_str(data, "kid"),
            x5u=_opt_url(data, "x5u"),
            x5c=x5c,
            x5t=_opt_bytes(data, "x5t", _SHA1_SIZE),
            x5t_s256=_opt_bytes(data, "x5t#S256", _SHA256_SIZE),
            typ=_opt_str(data, "typ"),
            cty=_opt_str(data, "cty"),
        )


@dataclass
class Protected:
    """Header parameters covered by the signature."""

    crit: list[str] | None = None
    url: str | None = None
    nonce: bytes | None = None
    b64: bool = True
    oth: Unprotected = field(default_factory=Unprotected)

    def to_dict(self) -> dict:
        """Return the JSON object form; ``b64`` appears only when false."""
        out: dict = {}
        if self.crit is not None:
            out["crit"] = list(self.crit)
        if self.url is not None:
            out["url"] = self.url
        if self.nonce is not None:
            out["nonce"] = encode_urlsafe(self.nonce)
        if not self.b64:
            out["b64"] = False
        out.update(self.oth.to_dict())
        return out

    @classmethod
    def from_dict(cls, data) -> Protected:
        """Build from a JSON object; unknown parameters are ignored."""
        data = _require_mapping(data)
        b64 = data.get("b64", True)
        if not isinstance(b64, bool):
            raise ValueError("'b64' must be a boolean")
        return cls(
            crit=_opt_str_list(data, "crit"),
            url=_opt_url(data, "url"),
            nonce=_opt_bytes(data, "nonce"),
            b64=b64,
            oth=Unprotected.from_dict(data),
        )

    def to_json(self) -> bytes:
        """Serialize to compact UTF-8 JSON."""
        return json.dumps(
            self.to_dict(), separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")

    @classmethod
    def from_json(cls, raw) -> Protected:
        """Parse a protected header from JSON text or bytes."""
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = bytes(raw).decode("utf-8")
        return cls.from_dict(json.loads(raw))