import pytest

from jwsig.b64 import (
    DecodeError,
    decode_standard,
    decode_urlsafe,
    encode_standard,
    encode_urlsafe,
)


def test_standard_vector():
    assert encode_standard(b"foobar") == "Zm9vYmFy"
    assert decode_standard("Zm9vYmFy") == b"foobar"


def test_urlsafe_has_no_padding():
    assert encode_urlsafe(b"f") == "Zg"


def test_urlsafe_alphabet():
    assert encode_urlsafe(b"\xfb\xff") == "-_8"


@pytest.mark.parametrize(
    "data", [b"", b"\x00", b"\x00\x01", b"abc", bytes(range(256)), b"\xff" * 7]
)
def test_round_trips(data):
    assert decode_urlsafe(encode_urlsafe(data)) == data
    assert decode_standard(encode_standard(data)) == data


def test_decode_accepts_bytes():
    assert decode_urlsafe(encode_urlsafe(b"xyz").encode()) == b"xyz"


@pytest.mark.parametrize("text", ["Zg==", "a", "Zh", "+/", "Zm9v YmFy", "é"])
def test_urlsafe_rejects(text):
    with pytest.raises(DecodeError):
        decode_urlsafe(text)


@pytest.mark.parametrize("text", ["Zg", "Zh==", "-_8=", "Zg=", "Zm9v\nYmFy"])
def test_standard_rejects(text):
    with pytest.raises(DecodeError):
        decode_standard(text)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        decode_urlsafe("!!")