"""Creating and checking JWS signatures with the supported keys."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .alg import Signing
from .b64 import encode_urlsafe
from .head import Protected, Unprotected
from .jws import Flattened, General, Signature
from .keys import SigningKey, VerifyingKey
from .state import (
    AlgorithmMismatch,
    CryptoError,
    InvalidSignature,
    SigningState,
    UnsupportedAlgorithm,
    VerifyingState,
)

# Algorithms from (roughly) strongest to weakest. HMAC leads each size class
# since it relies on no asymmetric cryptography, then RSA with PSS padding
# ahead of PKCS#1 v1.5, then ECDSA. When no algorithm is named, the first
# entry the key supports is chosen.
BY_STRENGTH = (
    Signing.HS512,
    Signing.PS512,
    Signing.RS512,
    Signing.ES512,
    Signing.HS384,
    Signing.PS384,
    Signing.RS384,
    Signing.ES384,
    Signing.HS256,
    Signing.PS256,
    Signing.RS256,
    Signing.ES256,
    Signing.ES256K,
)

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _check_chunk(chunk) -> bytes:
    if not isinstance(chunk, _BYTES_LIKE):
        raise TypeError("chunk must be bytes-like")
    return bytes(chunk)


class _Fanout:
    """Feeds the same bytes to several states."""

    def __init__(self, states) -> None:
        self.states = list(states)

    def update(self, chunk: bytes) -> None:
        for state in self.states:
            state.update(chunk)


class _UrlSafeEncoder:
    """Streams bytes to a sink as unpadded URL-safe Base64."""

    def __init__(self, sink) -> None:
        self._sink = sink
        self._pending = b""

    def update(self, chunk: bytes) -> None:
        data = self._pending + chunk
        cut = len(data) - len(data) % 3
        self._pending = data[cut:]
        if cut:
            self._sink.update(encode_urlsafe(data[:cut]).encode("ascii"))

    def finish(self) -> None:
        if self._pending:
            self._sink.update(encode_urlsafe(self._pending).encode("ascii"))
            self._pending = b""


def _payload_sink(sink, protected: bytes | None, b64: bool):
    """Write the protected header and separator; return where the payload goes."""
    head = _UrlSafeEncoder(sink)
    head.update(protected or b"")
    head.finish()
    sink.update(b".")
    return _UrlSafeEncoder(sink) if b64 else sink


def _finish_sink(sink) -> None:
    if isinstance(sink, _UrlSafeEncoder):
        sink.finish()


class Signer:
    """Signature creation in progress; feed it the payload, then finish."""

    def __init__(self, state: SigningState, protected, header, b64: bool) -> None:
        self._state = state
        self._protected = protected
        self._header = header
        self._sink = _payload_sink(state, protected, b64)

    def update(self, chunk) -> None:
        """Feed more payload bytes."""
        self._sink.update(_check_chunk(chunk))

    def finish(self) -> Signature:
        """Finish the payload and return the signature with its headers."""
        _finish_sink(self._sink)
        return Signature(
            signature=self._state.finish(),
            protected=self._protected,
            header=self._header,
        )


class _Check:
    """Verification of one signature by one key, under every candidate algorithm."""

    def __init__(self, states, protected, b64: bool, signature: bytes) -> None:
        self._fanout = _Fanout(states)
        self._signature = signature
        self._sink = _payload_sink(self._fanout, protected, b64)

    def update(self, chunk: bytes) -> None:
        self._sink.update(chunk)

    def finish(self) -> None:
        _finish_sink(self._sink)
        last: CryptoError = InvalidSignature("no algorithm can verify the signature")
        for state in self._fanout.states:
            try:
                state.finish(self._signature)
                return
            except CryptoError as exc:
                last = exc
        raise last


class Verifier:
    """Signature verification in progress; feed it the payload, then finish."""

    def __init__(self, checks) -> None:
        self._checks = list(checks)

    def update(self, chunk) -> None:
        """Feed more payload bytes."""
        data = _check_chunk(chunk)
        for check in self._checks:
            check.update(data)

    def finish(self) -> None:
        """Succeed if any key verifies any signature; otherwise raise."""
        last: CryptoError = InvalidSignature("no key can verify the signature")
        for check in self._checks:
            try:
                check.finish()
                return
            except CryptoError as exc:
                last = exc
        raise last


def _signing_key(key) -> SigningKey:
    return key if isinstance(key, SigningKey) else SigningKey(key)


def _verifying_key(key) -> VerifyingKey:
    if isinstance(key, VerifyingKey):
        return key
    if isinstance(key, SigningKey):
        return key.verifying_key()
    return VerifyingKey(key)


def _verifying_keys(keys) -> list[VerifyingKey]:
    single = isinstance(keys, (VerifyingKey, SigningKey, *_BYTES_LIKE))
    if single or not isinstance(keys, Iterable):
        return [_verifying_key(keys)]
    return [_verifying_key(key) for key in keys]


def _signatures(jws) -> list[Signature]:
    if isinstance(jws, Signature):
        return [jws]
    if isinstance(jws, Flattened):
        return [jws.signature]
    if isinstance(jws, General):
        return list(jws.signatures)
    raise TypeError(f"cannot verify {type(jws).__name__}")


def start_signing(key, protected=None, header=None) -> Signer:
    """Begin a signature, choosing the algorithm from the headers or the key."""
    key = _signing_key(key)
    palg = None if protected is None else protected.oth.alg
    halg = None if header is None else header.alg
    palg = None if palg is None else Signing(palg)
    halg = None if halg is None else Signing(halg)

    if palg is not None and halg is not None:
        if palg != halg:
            raise AlgorithmMismatch(
                f"protected header says {palg.value}, header says {halg.value}"
            )
        alg = palg
    elif palg is not None:
        alg = palg
    elif halg is not None:
        alg = halg
    else:
        alg = next((a for a in BY_STRENGTH if key.is_supported(a)), None)
        if alg is None:
            raise UnsupportedAlgorithm("key supports no signing algorithm")
        base = protected if protected is not None else Protected()
        protected = replace(base, oth=replace(base.oth, alg=alg))

    b64 = True if protected is None else protected.b64
    raw = None if protected is None else protected.to_json()
    return Signer(key.sign(alg), raw, header, b64)


def start_verifying(keys, jws) -> Verifier:
    """Begin checking the signatures of ``jws`` against one key or several."""
    checks = []
    for key in _verifying_keys(keys):
        for sig in _signatures(jws):
            prot = sig.protected_header
            alg = None if prot is None else prot.oth.alg
            if alg is None and sig.header is not None:
                alg = sig.header.alg
            alg = None if alg is None else Signing(alg)
            states: list[VerifyingState] = [
                key.verify(a)
                for a in BY_STRENGTH
                if key.is_supported(a) and (alg is None or alg == a)
            ]
            b64 = True if prot is None else prot.b64
            checks.append(_Check(states, sig.protected, b64, sig.signature))
    return Verifier(checks)


def sign(key, payload, protected=None, header=None) -> Flattened:
    """Sign ``payload`` and return the flattened JWS."""
    signer = start_signing(key, protected, header)
    signer.update(payload)
    return Flattened(payload=bytes(payload), signature=signer.finish())


def verify(keys, jws, payload=None) -> bytes:
    """Verify ``jws`` and return the payload it signs.

    ``payload`` is needed when the JWS carries none (a detached payload).
    """
    if payload is None:
        payload = getattr(jws, "payload", None)
    if payload is None:
        raise ValueError("the payload is detached and must be given")
    verifier = start_verifying(keys, jws)
    verifier.update(payload)
    verifier.finish()
    return bytes(payload)