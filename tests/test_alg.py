import pytest

from jwsig.alg import Signing


def test_from_name_returns_member():
    assert Signing.from_name("HS256") is Signing.HS256


def test_from_name_is_case_sensitive_for_eddsa():
    assert Signing.from_name("EdDSA") is Signing.EDDSA
    with pytest.raises(ValueError):
        Signing.from_name("EDDSA")


@pytest.mark.parametrize("member", list(Signing))
def test_name_round_trip(member):
    assert Signing.from_name(member.value) is member
    assert Signing.from_name(str(member)) is member


@pytest.mark.parametrize("name", ["none", "hs256", "", "RS1024"])
def test_unknown_name_rejected(name):
    with pytest.raises(ValueError):
        Signing.from_name(name)


def test_str_is_registered_name():
    member = Signing.from_name("PS384")
    assert str(member) == "PS384"


def test_member_compares_to_string_value():
    member = Signing.from_name("ES256K")
    assert member == "ES256K"