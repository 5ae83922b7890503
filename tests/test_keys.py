import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwsig.alg import Signing
from jwsig.b64 import decode_urlsafe, encode_urlsafe
from jwsig.keys import KeyKind, SigningKey, VerifyingKey
from jwsig.state import InvalidSignature, UnsupportedAlgorithm

EC_X = "MKBCTNIcKUSDii11ySs3526iDZ8AiTo7Tu6KPAqv7D4"
EC_Y = "4Etl6SRW2YiLUrN5vfvVHuhp7x8PxltmWWlbbM4IFyM"
EC_D = "870MB6gfuTJ4HtUnUvYMyJpr5eUZNP4Bk43bVdj3eAE"

EC_PUBLIC = {"kty": "EC", "crv": "P-256", "x": EC_X, "y": EC_Y, "use": "enc", "kid": "1"}
EC_PRIVATE = dict(EC_PUBLIC, d=EC_D)

RSA_N = (
    "0vx7agoebGcQSuuPiLJXZptN9nndrQmbXEps2aiAFbWhM78LhWx4cbbfAAtVT86zwu1RK7aPFFxuhDR1"
    "L6tSoc_BJECPebWKRXjBZCiFV4n3oknjhMstn64tZ_2W-5JsGY4Hc5n9yBXArwl93lqt7_RN5w6Cf0h4"
    "QyQ5v-65YGjQR0_FDW2QvzqY368QQMicAtaSqzs8KJZgnYb9c7d0zgdAZHzu6qMQvRL5hajrn1n91CbO"
    "pbISD08qNLyrdkt-bFTWhAI4vMQFh6WeZu0fM4lFd2NcRwr3XPksINHaQ-G_xBniIqbw0Ls1jF44-csF"
    "Cur-kEgU8awapJzKnqDKgw"
)
RSA_D = (
    "X4cTteJY_gn4FYPsXB8rdXix5vwsg1FLN5E3EaG6RJoVH-HLLKD9M7dx5oo7GURknchnrRweUkC7hT5f"
    "JLM0WbFAKNLWY2vv7B6NqXSzUvxT0_YSfqijwp3RTzlBaCxWp4doFk5N2o8Gy_nHNKroADIkJ46pRUoh"
    "sXywbReAdYaMwFs9tv8d_cPVY3i07a3t8MN6TNwm0dSawm9v47UiCl3Sk5ZiG7xojPLu4sbg1U2jx4IB"
    "TNBznbJSzFHK66jT8bgkuqsk0GjskDJk19Z4qwjwbsnn4j2WBii3RL-Us2lGVkY8fkFzme1z0HbIkfz0"
    "Y6mqnOYtqc0X4jfcKoAC8Q"
)
RSA_P = (
    "83i-7IvMGXoMXCskv73TKr8637FiO7Z27zv8oj6pbWUQyLPQBQxtPVnwD20R-60eTDmD2ujnMt5PoqMr"
    "m8RfmNhVWDtjjMmCMjOpSXicFHj7XOuVIYQyqVWlWEh6dN36GVZYk93N8Bc9vY41xy8B9RzzOGVQzXvN"
    "Evn7O0nVbfs"
)
RSA_Q = (
    "3dfOR9cuYq-0S-mkFLzgItgMEfFzB2q3hWehMuG0oCuqnb3vobLyumqjVZQO1dIrdwgTnCdpYzBcOfW5"
    "r370AFXjiWft_NGEiovonizhKpo9VVS78TzFgxkIdrecRezsZ-1kYd_s1qDbxtkDEgfAITAG9LUnADun"
    "4vIcb6yelxk"
)
RSA_DP = (
    "G4sPXkc6Ya9y8oJW9_ILj4xuppu0lzi_H7VTkS8xj5SdX3coE0oimYwxIi2emTAue0UOa5dpgFGyBJ4c"
    "8tQ2VF402XRugKDTP8akYhFo5tAA77Qe_NmtuYZc3C3m3I24G2GvR5sSDxUyAN2zq8Lfn9EUms6rY3Ob"
    "8YeiKkTiBj0"
)
RSA_DQ = (
    "s9lAH9fggBsoFR8Oac2R_E2gw282rT2kGOAhvIllETE1efrA6huUUvMfBcMpn8lqeW6vzznYY5SSQF7p"
    "MdC_agI3nG8Ibp1BUb0JUiraRNqUfLhcQb_d9GF4Dh7e74WbRsobRonujTYN1xCaP6TO61jvWrX-L18t"
    "xXw494Q_cgk"
)
RSA_QI = (
    "GyM_p6JrXySiz1toFgKbWV-JdI3jQ4ypu9rbMWx3rQJBfmt0FoYzgUIZEVFEcOqwemRN81zoDAaa-Bk0"
    "KWNGDjJHZDdDmFhW3AN7lI-puxk_mHZGJ11rxyR8O55XLSe3SPmRfKwZI6yU24ZxvQKFYItdldUKGzO6"
    "Ia6zTKhAVRU"
)

RSA_PUBLIC = {"kty": "RSA", "n": RSA_N, "e": "AQAB", "alg": "RS256", "kid": "2011-04-29"}
RSA_PRIVATE = dict(
    RSA_PUBLIC, d=RSA_D, p=RSA_P, q=RSA_Q, dp=RSA_DP, dq=RSA_DQ, qi=RSA_QI
)

EC_X_BYTES = bytes([
    48, 160, 66, 76, 210, 28, 41, 68, 131, 138, 45, 117, 201, 43, 55, 231,
    110, 162, 13, 159, 0, 137, 58, 59, 78, 238, 138, 60, 10, 175, 236, 62,
])


@pytest.fixture(scope="module")
def rsa_private():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _sign(key, alg, data):
    state = key.sign(alg)
    state.update(data)
    return state.finish()


def _verify(key, alg, data, signature):
    state = key.verify(alg)
    state.update(data)
    return state.finish(signature)


@pytest.mark.parametrize(
    "size, supported",
    [
        (16, {Signing.HS256}),
        (24, {Signing.HS256, Signing.HS384}),
        (32, {Signing.HS256, Signing.HS384, Signing.HS512}),
        (8, set()),
    ],
)
def test_oct_support_follows_length(size, supported):
    key = SigningKey(b"\x07" * size)
    assert key.kind is KeyKind.OCT
    assert key.strength() == size
    found = {alg for alg in Signing if key.is_supported(alg)}
    assert found == supported


def test_hmac_round_trip():
    key = SigningKey(b"k" * 32)
    sig = _sign(key, Signing.HS512, b"payload")
    assert len(sig) == 64
    verifier = key.verifying_key()
    assert _verify(verifier, Signing.HS512, b"payload", sig) is None
    with pytest.raises(InvalidSignature):
        _verify(verifier, Signing.HS512, b"tampered", sig)


def test_unsupported_algorithm_raises():
    key = SigningKey(b"k" * 16)
    with pytest.raises(UnsupportedAlgorithm):
        key.sign(Signing.HS512)
    with pytest.raises(UnsupportedAlgorithm):
        key.verifying_key().verify(Signing.ES256)


def test_algorithm_pin_restricts_support():
    key = SigningKey(b"k" * 32, alg=Signing.HS256)
    assert key.is_supported(Signing.HS256)
    assert not key.is_supported(Signing.HS512)
    with pytest.raises(UnsupportedAlgorithm):
        key.sign(Signing.HS384)
    assert key.verifying_key().alg is Signing.HS256


def test_non_signing_pin_supports_nothing():
    key = SigningKey(b"k" * 32, alg="RSA-OAEP")
    assert not any(key.is_supported(alg) for alg in Signing)


def test_unknown_name_is_not_supported():
    assert SigningKey(b"k" * 32).is_supported("XX999") is False


@pytest.mark.parametrize(
    "curve, alg, kind, size",
    [
        (ec.SECP256R1(), Signing.ES256, KeyKind.P256, 64),
        (ec.SECP384R1(), Signing.ES384, KeyKind.P384, 96),
    ],
)
def test_ec_round_trip(curve, alg, kind, size):
    key = SigningKey(ec.generate_private_key(curve))
    assert key.kind is kind
    assert key.strength() == 16
    assert {a for a in Signing if key.is_supported(a)} == {alg}
    sig = _sign(key, alg, b"message")
    assert len(sig) == size
    verifier = key.verifying_key()
    assert verifier.kind is kind
    assert _verify(verifier, alg, b"message", sig) is None
    with pytest.raises(InvalidSignature):
        _verify(verifier, alg, b"other", sig)


def test_unsupported_curve_rejected():
    with pytest.raises(UnsupportedAlgorithm):
        SigningKey(ec.generate_private_key(ec.SECP256K1()))


def test_rsa_support_and_round_trip(rsa_private):
    key = SigningKey(rsa_private)
    assert key.kind is KeyKind.RSA
    assert key.strength() == 16
    assert {a for a in Signing if key.is_supported(a)} == {Signing.RS256, Signing.PS256}
    verifier = key.verifying_key()
    for alg in (Signing.RS256, Signing.PS256):
        sig = _sign(key, alg, b"data")
        assert len(sig) == 256
        assert _verify(verifier, alg, b"data", sig) is None
        with pytest.raises(InvalidSignature):
            _verify(verifier, alg, b"datb", sig)


def test_wrong_material_types(rsa_private):
    with pytest.raises(TypeError):
        VerifyingKey(rsa_private)
    with pytest.raises(TypeError):
        SigningKey(rsa_private.public_key())
    with pytest.raises(TypeError):
        SigningKey("text")


def test_oct_from_jwk():
    raw = b"\x01" * 24
    key = SigningKey.from_jwk({"kty": "oct", "k": encode_urlsafe(raw), "alg": "HS384"})
    assert key.material == raw
    assert key.alg is Signing.HS384
    assert VerifyingKey.from_jwk({"kty": "oct", "k": encode_urlsafe(raw)}).material == raw


def test_ec_from_rfc_jwk():
    signer = SigningKey.from_jwk(EC_PRIVATE)
    verifier = VerifyingKey.from_jwk(EC_PUBLIC)
    assert signer.kind is KeyKind.P256
    assert verifier.material.public_numbers().x == int.from_bytes(EC_X_BYTES, "big")
    assert signer.material.private_numbers().private_value == int.from_bytes(
        decode_urlsafe(EC_D), "big"
    )
    sig = _sign(signer, Signing.ES256, b"hello")
    assert _verify(verifier, Signing.ES256, b"hello", sig) is None


def test_ec_jwk_without_private_part_cannot_sign():
    with pytest.raises(ValueError):
        SigningKey.from_jwk(EC_PUBLIC)


def test_ec_jwk_with_bad_coordinate_length():
    with pytest.raises(ValueError):
        VerifyingKey.from_jwk(dict(EC_PUBLIC, x=encode_urlsafe(EC_X_BYTES[:31])))


def test_rsa_from_rfc_jwk():
    signer = SigningKey.from_jwk(RSA_PRIVATE)
    verifier = VerifyingKey.from_jwk(RSA_PUBLIC)
    assert signer.alg is Signing.RS256
    assert signer.is_supported(Signing.RS256)
    assert not signer.is_supported(Signing.PS256)
    assert verifier.material.public_numbers().n == int.from_bytes(
        decode_urlsafe(RSA_N), "big"
    )
    sig = _sign(signer, Signing.RS256, b"claims")
    assert _verify(verifier, Signing.RS256, b"claims", sig) is None


def test_rsa_primes_recovered_when_absent():
    full = SigningKey.from_jwk(RSA_PRIVATE).material.private_numbers()
    minimal = {k: v for k, v in RSA_PRIVATE.items() if k not in {"p", "q", "dp", "dq", "qi"}}
    recovered = SigningKey.from_jwk(minimal).material.private_numbers()
    assert {recovered.p, recovered.q} == {full.p, full.q}
    assert recovered.d == full.d


@pytest.mark.parametrize(
    "jwk",
    [
        {"kty": "OKP", "crv": "Ed25519", "x": "11qYAYKxCrfVS_7TyWQHOg7hcvPapiMlrwIaaPcHURo"},
        dict(EC_PUBLIC, crv="secp256k1"),
        {"kty": "XYZ"},
    ],
)
def test_unsupported_jwk_kinds(jwk):
    with pytest.raises(UnsupportedAlgorithm):
        VerifyingKey.from_jwk(jwk)


def test_malformed_jwk_member():
    with pytest.raises(ValueError):
        SigningKey.from_jwk({"kty": "oct", "k": "not base64!"})
    with pytest.raises(ValueError):
        SigningKey.from_jwk(["kty", "oct"])