"""JSON Web Signature creation, verification and serialization with HMAC, ECDSA and RSA keys."""

__version__ = "0.1.0"

__all__ = ["alg", "b64", "head", "jws", "state", "keys", "crypto", "generate"]