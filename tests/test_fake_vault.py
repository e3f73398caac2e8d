import random

import pytest

from safecli.errors import (
    ContentNotFound,
    EntryNotFound,
    NetDataError,
    NotEnoughBalance,
    VersionNotFound,
)
from safecli.fake_vault import FakeVault
from safecli.primitives import Coins, MDataValue, SecretKey, xorname_from_pk, xorname_to_hex


@pytest.fixture
def vault(tmp_path):
    return FakeVault(tmp_path / "vault.json")


def test_allocate_test_coins(vault):
    sk_to = SecretKey.random()
    balance = Coins.from_str("2.345678912")
    vault.allocate_test_coins(sk_to.public_key(), balance)
    assert vault.get_balance_from_sk(sk_to) == balance


def test_create_balance(vault):
    sk = SecretKey.random()
    vault.allocate_test_coins(sk.public_key(), Coins.from_str("2.345678912"))
    pk_to = SecretKey.random().public_key()
    xorname = vault.create_balance(sk, pk_to, Coins.from_str("1.234567891"))
    assert xorname == xorname_from_pk(pk_to)


def test_check_balance(vault):
    sk = SecretKey.random()
    balance = Coins.from_str("2.3")
    vault.allocate_test_coins(sk.public_key(), balance)
    assert vault.get_balance_from_sk(sk) == balance

    sk_to = SecretKey.random()
    preload = Coins.from_str("1.234567891")
    vault.create_balance(sk, sk_to.public_key(), preload)
    assert vault.get_balance_from_sk(sk_to) == preload
    assert vault.get_balance_from_sk(sk) == Coins.from_str("1.065432109")


def test_safecoin_transfer(vault):
    sk1, sk2 = SecretKey.random(), SecretKey.random()
    pk2 = sk2.public_key()
    vault.allocate_test_coins(sk1.public_key(), Coins.from_str("2.5"))
    vault.allocate_test_coins(pk2, Coins.from_str("5.7"))
    assert vault.get_balance_from_sk(sk1) == Coins.from_str("2.5")
    assert vault.get_balance_from_sk(sk2) == Coins.from_str("5.7")

    tx_id = random.getrandbits(64)
    result = vault.safecoin_transfer_to_xorname(
        sk1, xorname_from_pk(pk2), tx_id, Coins.from_str("1.4")
    )
    assert result == tx_id
    assert vault.get_transaction(tx_id, pk2, sk2) == "Success(1.4)"
    assert vault.get_balance_from_sk(sk1) == Coins.from_str("1.1")
    assert vault.get_balance_from_sk(sk2) == Coins.from_str("7.1")


def test_transfer_to_pk(vault):
    sk1, sk2 = SecretKey.random(), SecretKey.random()
    vault.allocate_test_coins(sk1.public_key(), Coins.from_str("3"))
    vault.allocate_test_coins(sk2.public_key(), Coins.from_str("0"))
    assert vault.safecoin_transfer_to_pk(sk1, sk2.public_key(), 7, Coins.from_str("1")) == 7
    assert vault.get_balance_from_sk(sk2) == Coins.from_str("1")


def test_create_balance_without_source(vault):
    with pytest.raises(NetDataError) as info:
        vault.create_balance(None, SecretKey.random().public_key(), Coins.from_str("1"))
    assert info.value.message == 'Failed to create a CoinBalance: "NoSuchBalance"'


def test_not_enough_balance(vault):
    sk = SecretKey.random()
    vault.allocate_test_coins(sk.public_key(), Coins.from_str("1.5"))
    with pytest.raises(NotEnoughBalance) as info:
        vault.create_balance(sk, SecretKey.random().public_key(), Coins.from_str("2"))
    assert info.value.message == "1.5"


def test_balance_not_found(vault):
    with pytest.raises(ContentNotFound):
        vault.get_balance_from_sk(SecretKey.random())


def test_transaction_not_found(vault):
    sk = SecretKey.random()
    with pytest.raises(ContentNotFound) as info:
        vault.get_transaction(42, sk.public_key(), sk)
    assert info.value.message == "Transaction not found with id '42'"


def test_immutable_data_round_trip(vault):
    xorname = vault.files_put_published_immutable(b"hello")
    assert vault.files_get_published_immutable(xorname) == b"hello"
    with pytest.raises(NetDataError):
        vault.files_get_published_immutable(bytes(32))


def test_append_only_versions(vault):
    name = vault.put_seq_append_only_data([(b"k0", b"v0")], None, 1100, None)
    assert vault.get_current_seq_append_only_data_version(name, 1100) == 0
    assert vault.append_seq_append_only_data([(b"k1", b"v1")], 1, name, 1100) == 1
    assert vault.get_latest_seq_append_only_data(name, 1100) == (1, (b"k1", b"v1"))
    assert vault.get_seq_append_only_data(name, 1100, 0) == (b"k0", b"v0")
    with pytest.raises(VersionNotFound):
        vault.get_seq_append_only_data(name, 1100, 2)


def test_append_only_not_found(vault):
    name = bytes(32)
    with pytest.raises(ContentNotFound) as info:
        vault.get_latest_seq_append_only_data(name, 1100)
    assert info.value.message == (
        f"Sequential AppendOnlyData not found at Xor name: {xorname_to_hex(name)}"
    )


def test_mutable_data_entries(vault):
    name = vault.put_seq_mutable_data(None, 1000, None)
    vault.seq_mutable_data_insert(name, 1000, b"b", b"2")
    vault.seq_mutable_data_insert(name, 1000, b"a", b"1")
    entries = vault.list_seq_mdata_entries(name, 1000)
    assert list(entries) == [b"a", b"b"]
    assert vault.seq_mutable_data_get_value(name, 1000, b"a") == MDataValue(b"1", 0)

    vault.seq_mutable_data_update(name, 1000, b"a", b"9", 1)
    assert vault.seq_mutable_data_get_value(name, 1000, b"a").data == b"9"
    with pytest.raises(EntryNotFound):
        vault.seq_mutable_data_update(name, 1000, b"zz", b"9", 1)

    vault.mutable_data_delete(name, 1000)
    with pytest.raises(ContentNotFound):
        vault.get_seq_mdata(name, 1000)


def test_put_mutable_data_keeps_existing(vault):
    name = vault.put_seq_mutable_data(None, 1000, None)
    vault.seq_mutable_data_insert(name, 1000, b"k", b"v")
    assert vault.put_seq_mutable_data(name, 1000, None) == name
    assert vault.seq_mutable_data_get_value(name, 1000, b"k").data == b"v"


def test_persistence_round_trip(tmp_path):
    path = tmp_path / "vault.json"
    sk = SecretKey.random()
    with FakeVault(path) as vault:
        vault.allocate_test_coins(sk.public_key(), Coins.from_str("4.25"))
        blob = vault.files_put_published_immutable(b"data")
        seq = vault.put_seq_append_only_data([(b"t", b"x")], None, 1100, None)
        md = vault.put_seq_mutable_data(None, 1000, None)
        vault.seq_mutable_data_insert(md, 1000, b"k", b"v")

    reloaded = FakeVault(path)
    assert reloaded.get_balance_from_sk(sk) == Coins.from_str("4.25")
    assert reloaded.files_get_published_immutable(blob) == b"data"
    assert reloaded.get_latest_seq_append_only_data(seq, 1100) == (0, (b"t", b"x"))
    assert reloaded.seq_mutable_data_get_value(md, 1000, b"k") == MDataValue(b"v", 0)