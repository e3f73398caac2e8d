import pytest

from safecli.errors import InvalidAmount, InvalidInput
from safecli.primitives import (
    Coins,
    MDataValue,
    PublicKey,
    SecretKey,
    random_xorname,
    xorname_from_pk,
    xorname_to_hex,
)


@pytest.mark.parametrize("text", ["2.345678912", "1.234567891", "0.000000001", "7.1"])
def test_coins_round_trip(text):
    assert str(Coins.from_str(text)) == text


def test_coins_subtraction_matches_source_case():
    result = Coins.from_str("2.3") - Coins.from_str("1.234567891")
    assert result == Coins.from_str("1.065432109")


def test_coins_transfer_arithmetic():
    assert Coins.from_str("2.5") - Coins.from_str("1.4") == Coins.from_str("1.1")
    assert Coins.from_str("5.7") + Coins.from_str("1.4") == Coins.from_str("7.1")


def test_coins_subtraction_underflow():
    with pytest.raises(OverflowError):
        Coins.from_str("1") - Coins.from_str("1.000000001")


def test_coins_addition_overflow():
    big = Coins(2**64 - 1)
    with pytest.raises(OverflowError):
        big + Coins(1)


@pytest.mark.parametrize(
    "text", ["abc", "-1", "1.0000000001", "", "1.2.3", "18446744073.709551616"]
)
def test_coins_invalid(text):
    with pytest.raises(InvalidAmount):
        Coins.from_str(text)


def test_coins_ordering():
    assert Coins.from_str("1.1") < Coins.from_str("1.2")


def test_public_key_hex_round_trip():
    pk = SecretKey.random().public_key()
    assert PublicKey.from_hex(pk.to_hex()) == pk
    assert len(pk.to_hex()) == 64


def test_public_key_bad_hex():
    with pytest.raises(InvalidInput):
        PublicKey.from_hex("zz")
    with pytest.raises(InvalidInput):
        PublicKey.from_hex("abcd")


def test_secret_key_public_key_is_stable():
    sk = SecretKey.random()
    assert sk.public_key() == sk.public_key()
    assert SecretKey.random().public_key() != sk.public_key()


def test_xorname_from_pk_deterministic():
    pk = SecretKey.random().public_key()
    xorname = xorname_from_pk(pk)
    assert xorname == xorname_from_pk(pk)
    assert len(xorname) == 32
    assert xorname_to_hex(xorname) == pk.to_hex()


def test_random_xorname():
    first, second = random_xorname(), random_xorname()
    assert len(first) == 32
    assert first != second
    assert bytes.fromhex(xorname_to_hex(first)) == first


def test_mdata_value_defaults():
    value = MDataValue(b"data")
    assert value.version == 0
    assert value == MDataValue(b"data", 0)