"""JSON Web Signature structures and their compact and JSON serializations."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field

from .b64 import DecodeError, decode_urlsafe, encode_urlsafe
from .head import Protected, Unprotected


class FormatError(ValueError):
    """Raised when a JWS cannot be parsed."""


def _decode_field(value, name: str) -> bytes:
    if not isinstance(value, str):
        raise FormatError(f"{name!r} must be a base64url string")
    try:
        return decode_urlsafe(value)
    except DecodeError as exc:
        raise FormatError(f"{name!r}: {exc}") from exc


def _optional_bytes(data: Mapping, name: str):
    value = data.get(name)
    return None if value is None else _decode_field(value, name)


def _require_mapping(data) -> Mapping:
    if not isinstance(data, Mapping):
        raise FormatError("JWS must be a JSON object")
    return data


@dataclass(frozen=True)
class Signature:
    """One signature with its headers.

    ``protected`` holds the exact JSON bytes of the protected header, since
    the signature covers those bytes; ``protected_header`` is their parsed form.
    """

    signature: bytes
    protected: bytes | None = None
    header: Unprotected | None = None
    protected_header: Protected | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", bytes(self.signature))
        parsed = None
        if self.protected is not None:
            object.__setattr__(self, "protected", bytes(self.protected))
            try:
                parsed = Protected.from_json(self.protected)
            except ValueError as exc:
                raise FormatError(f"invalid protected header: {exc}") from exc
        object.__setattr__(self, "protected_header", parsed)

    def to_dict(self) -> dict:
        """Return the JSON object form."""
        return {
            "header": None if self.header is None else self.header.to_dict(),
            "protected": None
            if self.protected is None
            else encode_urlsafe(self.protected),
            "signature": encode_urlsafe(self.signature),
        }

    @classmethod
    def from_dict(cls, data) -> Signature:
        """Build from a JSON object."""
        data = _require_mapping(data)
        if "signature" not in data:
            raise FormatError("missing 'signature'")
        header = data.get("header")
        if header is not None:
            try:
                header = Unprotected.from_dict(header)
            except ValueError as exc:
                raise FormatError(f"invalid header: {exc}") from exc
        return cls(
            signature=_decode_field(data["signature"], "signature"),
            protected=_optional_bytes(data, "protected"),
            header=header,
        )


@dataclass
class Flattened:
    """A payload with a single signature."""

    payload: bytes | None
    signature: Signature

    @classmethod
    def parse(cls, text: str) -> Flattened:
        """Parse the compact serialization ``protected.payload.signature``."""
        parts = text.split(".")
        if len(parts) != 3:
            raise FormatError("compact JWS must have exactly three parts")
        prot, payl, sign = parts
        payload = None if payl == "" else _decode_field(payl, "payload")
        return cls(
            payload=payload,
            signature=Signature(
                signature=_decode_field(sign, "signature"),
                protected=_decode_field(prot, "protected"),
                header=None,
            ),
        )

    def to_dict(self) -> dict:
        """Return the flattened JSON serialization."""
        return {
            "payload": None if self.payload is None else encode_urlsafe(self.payload),
            **self.signature.to_dict(),
        }

    @classmethod
    def from_dict(cls, data) -> Flattened:
        """Build from the flattened JSON serialization."""
        data = _require_mapping(data)
        return cls(
            payload=_optional_bytes(data, "payload"),
            signature=Signature.from_dict(data),
        )

    def __str__(self) -> str:
        sig = self.signature
        prot = "" if sig.protected is None else encode_urlsafe(sig.protected)
        payl = "" if self.payload is None else encode_urlsafe(self.payload)
        return f"{prot}.{payl}.{encode_urlsafe(sig.signature)}"


@dataclass
class General:
    """A payload with any number of signatures."""

    payload: bytes | None
    signatures: list[Signature]

    @classmethod
    def parse(cls, text: str) -> General:
        """Parse the compact serialization into the general form."""
        return cls.from_flattened(Flattened.parse(text))

    @classmethod
    def from_flattened(cls, flattened: Flattened) -> General:
        """Wrap a flattened JWS as a general one with one signature."""
        return cls(payload=flattened.payload, signatures=[flattened.signature])

    def to_dict(self) -> dict:
        """Return the general JSON serialization."""
        return {
            "payload": None if self.payload is None else encode_urlsafe(self.payload),
            "signatures": [sig.to_dict() for sig in self.signatures],
        }

    @classmethod
    def from_dict(cls, data) -> General:
        """Build from the general JSON serialization."""
        data = _require_mapping(data)
        signatures = data.get("signatures")
        if not isinstance(signatures, list):
            raise FormatError("'signatures' must be a list")
        return cls(
            payload=_optional_bytes(data, "payload"),
            signatures=[Signature.from_dict(sig) for sig in signatures],
        )


def parse_compact(text: str) -> Flattened:
    """Parse a compact JWS."""
    return Flattened.parse(text)


def parse_json(data) -> General | Flattened:
    """Parse a JSON-serialized JWS, trying the general form first."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError as exc:
            raise FormatError(f"invalid JSON: {exc}") from exc
    try:
        return General.from_dict(data)
    except FormatError:
        pass
    try:
        return Flattened.from_dict(data)
    except FormatError as exc:
        raise FormatError("data did not match any JWS serialization") from exc