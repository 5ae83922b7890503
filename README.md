# jwsig

Create, verify and serialize JSON Web Signatures (JWS) in Python.

`jwsig` reads and writes the three JWS forms: compact, flattened JSON and
general JSON. It signs and verifies them with HMAC (`HS256`, `HS384`,
`HS512`), ECDSA on P-256 and P-384 (`ES256`, `ES384`) and RSA (`RS256`,
`RS384`, `RS512`, `PS256`, `PS384`, `PS512`) keys. The cryptographic
primitives come from the `cryptography` package.

## Installation

```
pip install jwsig
```

## Modules

| Module            | Contents                                                                 |
|-------------------|--------------------------------------------------------------------------|
| `jwsig.alg`       | `Signing`, the registered signing algorithm names                        |
| `jwsig.b64`       | strict base64url / standard base64 helpers and `DecodeError`             |
| `jwsig.head`      | `Protected` and `Unprotected` header dataclasses                         |
| `jwsig.jws`       | `Signature`, `Flattened`, `General`, `parse_compact`, `parse_json`       |
| `jwsig.state`     | low-level `SigningState` / `VerifyingState` and the error classes        |
| `jwsig.keys`      | `SigningKey`, `VerifyingKey`, `KeyKind`                                  |
| `jwsig.crypto`    | `sign`, `verify`, `start_signing`, `start_verifying`                     |
| `jwsig.generate`  | `generate_oct`, `generate_ec`, `generate_rsa`, `generate_for`, `EcCurve` |

## Keys

`SigningKey` takes raw bytes (an HMAC secret), a `cryptography` EC private
key on P-256 or P-384, or an RSA private key. `VerifyingKey` takes bytes or
the matching public key. Both can also be built from a JWK object given as a
dict:

```python
from jwsig.generate import generate_oct
from jwsig.keys import SigningKey

key = SigningKey.from_jwk(generate_oct(32))
public = key.verifying_key()
```

An `alg` member in the JWK, or the `alg` argument of the constructor, pins
the key to that one algorithm. `is_supported(alg)` tells whether a key may
be used with an algorithm: an HMAC secret must be at least 16, 24 or 32
bytes long for `HS256`, `HS384` or `HS512`, and an RSA key must be at least
2048, 3072 or 4096 bits for the 256, 384 or 512 variants.

## Signing

```python
from jwsig.crypto import sign

flattened = sign(key, b"hello world")
compact = str(flattened)   # "<protected>.<payload>.<signature>"
```

If neither the protected nor the unprotected header names an algorithm, the
strongest one the key supports is chosen and written into the protected
header. If both headers name an algorithm, they must agree, or
`AlgorithmMismatch` is raised.

Headers are plain dataclasses. Parameters such as `alg`, `kid`, `typ` and
`cty` live in `Unprotected`; `Protected` adds `crit`, `url`, `nonce` and
`b64`, and carries the rest in its `oth` field:

```python
from jwsig.head import Protected, Unprotected

protected = Protected(oth=Unprotected(typ="JWT"))
header = Unprotected(kid="key-1")
flattened = sign(key, b"payload", protected, header)
```

Setting `b64=False` on `Protected` signs the raw payload instead of its
base64url encoding.

## Verifying

```python
from jwsig.crypto import verify
from jwsig.jws import parse_compact

jws = parse_compact(compact)
payload = verify([public], jws)   # returns b"hello world"
```

`verify` accepts one key or a list of keys (signing keys are turned into
their verifying keys) and a `Signature`, `Flattened` or `General`. It
succeeds as soon as any key verifies any signature and returns the payload.
When the JWS carries no payload (a detached payload), pass it as the third
argument. Failures raise an error from `jwsig.state`: `InvalidSignature`,
`UnsupportedAlgorithm` or `AlgorithmMismatch`, all subclasses of
`CryptoError`.

For streaming payloads, use `start_signing(key, protected, header)` or
`start_verifying(keys, jws)`, feed the payload with `update(chunk)`, then
call `finish()`.

## Serialization

```python
from jwsig.jws import Flattened, General, parse_json

flat = Flattened.parse(compact)
general = General.from_flattened(flat)
as_dict = general.to_dict()
again = parse_json(as_dict)       # General or Flattened
```

`parse_json` takes a dict or JSON text and tries the general form before the
flattened one. Malformed input raises `jwsig.jws.FormatError`; the helpers in
`jwsig.b64` raise `DecodeError` on invalid or non-canonical base64.

## Key generation

```python
from jwsig.alg import Signing
from jwsig.generate import EcCurve, generate_ec, generate_for, generate_rsa

jwk = generate_for(Signing.ES256)
ec_jwk = generate_ec(EcCurve.P384)
rsa_jwk = generate_rsa(2048)
```

Each function returns a private JWK as a dict. `generate_for` picks the key
type and size that suit the algorithm: 16/24/32-byte secrets for
`HS256`/`HS384`/`HS512`, P-256/P-384 for `ES256`/`ES384`, and 2048/3072/4096-bit
RSA for the 256/384/512 `RS*` and `PS*` variants. It also accepts a dict of
JWK parameters with an `alg` member and keeps those parameters in the result.

## What it does not do

- `ES512`, `ES256K` and `EdDSA` are known names in `Signing`, but no key can
  sign or verify with them; P-521 and secp256k1 keys cannot be generated.
- JWKs are read from and generated as plain dicts; there is no JWK or JWK-set
  class and no key thumbprints.
- There is no JWT claims handling, no encryption (JWE) and no command-line
  tool.