"""Algorithm identifiers registered for JSON Web Signatures."""

from __future__ import annotations

from enum import Enum


class Signing(str, Enum):
    """A JWS signing algorithm, valued by its registered ``alg`` name."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    ES256K = "ES256K"
    EDDSA = "EdDSA"

    @classmethod
    def from_name(cls, name):
        """Return the algorithm registered under ``name``."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown signing algorithm: {name!r}") from None

    def __str__(self) -> str:
        return self.value