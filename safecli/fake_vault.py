"""An in-memory stand-in for the network, persisted to a local JSON file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any

from .errors import (
    ContentNotFound,
    EmptyContent,
    EntryNotFound,
    NetDataError,
    NotEnoughBalance,
    Unexpected,
    VersionNotFound,
)
from .primitives import (
    Coins,
    MDataValue,
    PublicKey,
    SecretKey,
    random_xorname,
    xorname_from_pk,
    xorname_to_hex,
)

log = logging.getLogger(__name__)

FAKE_VAULT_FILE = "./fake_vault_data.json"

AppendOnlyEntry = tuple[bytes, bytes]


@dataclass
class _CoinBalance:
    owner: PublicKey
    value: Coins


@dataclass
class _VaultData:
    coin_balances: dict[str, _CoinBalance] = field(default_factory=dict)
    txs: dict[str, dict[str, str]] = field(default_factory=dict)
    published_seq_append_only: dict[str, list[AppendOnlyEntry]] = field(
        default_factory=dict
    )
    mutable_data: dict[str, dict[bytes, MDataValue]] = field(default_factory=dict)
    published_immutable_data: dict[str, bytes] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            "coin_balances": {
                name: {"owner": bal.owner.to_hex(), "value": str(bal.value)}
                for name, bal in sorted(self.coin_balances.items())
            },
            "txs": {
                name: dict(sorted(txs.items()))
                for name, txs in sorted(self.txs.items())
            },
            "published_seq_append_only": {
                name: [[key.hex(), value.hex()] for key, value in entries]
                for name, entries in sorted(self.published_seq_append_only.items())
            },
            "mutable_data": {
                name: {
                    key.hex(): {"data": val.data.hex(), "version": val.version}
                    for key, val in sorted(entries.items())
                }
                for name, entries in sorted(self.mutable_data.items())
            },
            "published_immutable_data": {
                name: data.hex()
                for name, data in sorted(self.published_immutable_data.items())
            },
        }

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> _VaultData:
        return cls(
            coin_balances={
                name: _CoinBalance(
                    owner=PublicKey.from_hex(bal["owner"]),
                    value=Coins.from_str(bal["value"]),
                )
                for name, bal in raw.get("coin_balances", {}).items()
            },
            txs={name: dict(txs) for name, txs in raw.get("txs", {}).items()},
            published_seq_append_only={
                name: [(bytes.fromhex(k), bytes.fromhex(v)) for k, v in entries]
                for name, entries in raw.get("published_seq_append_only", {}).items()
            },
            mutable_data={
                name: {
                    bytes.fromhex(k): MDataValue(
                        bytes.fromhex(v["data"]), int(v["version"])
                    )
                    for k, v in entries.items()
                }
                for name, entries in raw.get("mutable_data", {}).items()
            },
            published_immutable_data={
                name: bytes.fromhex(data)
                for name, data in raw.get("published_immutable_data", {}).items()
            },
        )


def _not_found_seq(xorname_hex: str) -> ContentNotFound:
    return ContentNotFound(
        f"Sequential AppendOnlyData not found at Xor name: {xorname_hex}"
    )


class FakeVault:
    """Keeps coin balances and data locally instead of on the network.

    The data is read from ``path`` when the vault is created and written back
    by :meth:`save`, which also runs when the vault is used as a context manager.
    """

    def __init__(self, path: str | Path = FAKE_VAULT_FILE) -> None:
        self.path = Path(path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as err:
            log.debug("Error reading mock file. %s", err)
            self._data = _VaultData()
        else:
            try:
                self._data = _VaultData.from_json(json.loads(text))
            except (ValueError, KeyError, TypeError) as err:
                raise Unexpected(f"Failed to read fake vault DB file: {err}") from err

    def __enter__(self) -> FakeVault:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.save()

    def save(self) -> None:
        """Write the vault data to its file."""
        serialised = json.dumps(self._data.to_json())
        log.debug("Writing serialised fake vault data = %s", serialised)
        self.path.write_text(serialised, encoding="utf-8")

    def connect(self, app_id: str, auth_credentials: str | None = None) -> None:
        log.debug("Using mock so there is no connection to network")

    # Coin balances

    def _balance_from_xorname(self, xorname: bytes) -> _CoinBalance:
        balance = self._data.coin_balances.get(xorname_to_hex(xorname))
        if balance is None:
            raise ContentNotFound("CoinBalance data not found")
        return balance

    def _subtract_coins(self, sk: SecretKey, amount: Coins) -> None:
        from_balance = self.get_balance_from_sk(sk)
        if amount > from_balance:
            raise NotEnoughBalance(str(from_balance))
        from_pk = sk.public_key()
        self._data.coin_balances[xorname_to_hex(xorname_from_pk(from_pk))] = (
            _CoinBalance(owner=from_pk, value=from_balance - amount)
        )

    def create_balance(
        self, from_sk: SecretKey | None, new_balance_owner: PublicKey, amount: Coins
    ) -> bytes:
        """Create a balance for ``new_balance_owner`` funded from ``from_sk``."""
        if from_sk is None:
            raise NetDataError('Failed to create a CoinBalance: "NoSuchBalance"')
        self._subtract_coins(from_sk, amount)
        to_xorname = xorname_from_pk(new_balance_owner)
        self._data.coin_balances[xorname_to_hex(to_xorname)] = _CoinBalance(
            owner=new_balance_owner, value=amount
        )
        return to_xorname

    def allocate_test_coins(self, to_pk: PublicKey, amount: Coins) -> bytes:
        xorname = xorname_from_pk(to_pk)
        self._data.coin_balances[xorname_to_hex(xorname)] = _CoinBalance(
            owner=to_pk, value=amount
        )
        return xorname

    def get_balance_from_sk(self, sk: SecretKey) -> Coins:
        return self._balance_from_xorname(xorname_from_pk(sk.public_key())).value

    def safecoin_transfer_to_xorname(
        self, from_sk: SecretKey, to_xorname: bytes, tx_id: int, amount: Coins
    ) -> int:
        to_hex = xorname_to_hex(to_xorname)
        self._data.txs.setdefault(to_hex, {})[str(tx_id)] = f"Success({amount})"

        self._subtract_coins(from_sk, amount)

        to_balance = self._balance_from_xorname(to_xorname)
        try:
            new_value = to_balance.value + amount
        except OverflowError as err:
            raise Unexpected(
                "Failed to credit destination due to overflow...maybe a millionaire's problem?!"
            ) from err
        self._data.coin_balances[to_hex] = _CoinBalance(
            owner=to_balance.owner, value=new_value
        )
        return tx_id

    def safecoin_transfer_to_pk(
        self, from_sk: SecretKey, to_pk: PublicKey, tx_id: int, amount: Coins
    ) -> int:
        return self.safecoin_transfer_to_xorname(
            from_sk, xorname_from_pk(to_pk), tx_id, amount
        )

    def get_transaction(self, tx_id: int, pk: PublicKey, sk: SecretKey) -> str:
        txs = self._data.txs.get(xorname_to_hex(xorname_from_pk(pk)), {})
        state = txs.get(str(tx_id))
        if state is None:
            raise ContentNotFound(f"Transaction not found with id '{tx_id}'")
        return state

    # Immutable data

    def files_put_published_immutable(self, data: bytes) -> bytes:
        xorname = random_xorname()
        self._data.published_immutable_data[xorname_to_hex(xorname)] = bytes(data)
        return xorname

    def files_get_published_immutable(self, xorname: bytes) -> bytes:
        data = self._data.published_immutable_data.get(xorname_to_hex(xorname))
        if data is None:
            raise NetDataError("No ImmutableData found at this address")
        return data

    # Sequential append-only data

    def put_seq_append_only_data(
        self,
        data: list[AppendOnlyEntry],
        name: bytes | None = None,
        tag: int = 0,
        permissions: str | None = None,
    ) -> bytes:
        xorname = name if name is not None else random_xorname()
        self._data.published_seq_append_only[xorname_to_hex(xorname)] = [
            (bytes(k), bytes(v)) for k, v in data
        ]
        return xorname

    def _seq_entries(self, name: bytes) -> list[AppendOnlyEntry]:
        xorname_hex = xorname_to_hex(name)
        entries = self._data.published_seq_append_only.get(xorname_hex)
        if entries is None:
            raise _not_found_seq(xorname_hex)
        return entries

    def append_seq_append_only_data(
        self, data: list[AppendOnlyEntry], new_version: int, name: bytes, tag: int
    ) -> int:
        entries = self._seq_entries(name)
        entries.extend((bytes(k), bytes(v)) for k, v in data)
        return len(entries) - 1

    def get_latest_seq_append_only_data(
        self, name: bytes, tag: int
    ) -> tuple[int, AppendOnlyEntry]:
        entries = self._seq_entries(name)
        if not entries:
            raise EmptyContent(
                f"Empty Sequential AppendOnlyData found at Xor name {xorname_to_hex(name)}"
            )
        return len(entries) - 1, entries[-1]

    def get_current_seq_append_only_data_version(self, name: bytes, tag: int) -> int:
        entries = self._seq_entries(name)
        if not entries:
            raise EmptyContent(
                f"Empty Sequential AppendOnlyData found at Xor name {xorname_to_hex(name)}"
            )
        return len(entries) - 1

    def get_seq_append_only_data(
        self, name: bytes, tag: int, version: int
    ) -> AppendOnlyEntry:
        entries = self._seq_entries(name)
        if version < 0 or version >= len(entries):
            raise VersionNotFound(
                f"Invalid version ({version}) for Sequential AppendOnlyData "
                f"found at Xor name {xorname_to_hex(name)}"
            )
        return entries[version]

    # Sequential mutable data

    def put_seq_mutable_data(
        self, name: bytes | None = None, tag: int = 0, permissions: str | None = None
    ) -> bytes:
        xorname = name if name is not None else random_xorname()
        self._data.mutable_data.setdefault(xorname_to_hex(xorname), {})
        return xorname

    def get_seq_mdata(self, name: bytes, tag: int) -> dict[bytes, MDataValue]:
        """Return a copy of the entries of the mutable data at ``name``."""
        xorname_hex = xorname_to_hex(name)
        log.debug("attempting to locate scl mock mdata: %s", xorname_hex)
        entries = self._data.mutable_data.get(xorname_hex)
        if entries is None:
            raise _not_found_seq(xorname_hex)
        return dict(sorted(entries.items()))

    def seq_mutable_data_insert(
        self, name: bytes, tag: int, key: bytes, value: bytes
    ) -> None:
        entries = self.get_seq_mdata(name, tag)
        entries[bytes(key)] = MDataValue(data=bytes(value), version=0)
        self._data.mutable_data[xorname_to_hex(name)] = entries

    def mutable_data_delete(self, name: bytes, tag: int) -> None:
        xorname_hex = xorname_to_hex(name)
        if self._data.mutable_data.pop(xorname_hex, None) is None:
            raise _not_found_seq(xorname_hex)

    def seq_mutable_data_get_value(
        self, name: bytes, tag: int, key: bytes
    ) -> MDataValue:
        value = self.get_seq_mdata(name, tag).get(bytes(key))
        if value is None:
            raise EntryNotFound(
                "Entry not found in Sequential MutableData found at Xor name: "
                f"{xorname_to_hex(name)}"
            )
        return value

    def list_seq_mdata_entries(self, name: bytes, tag: int) -> dict[bytes, MDataValue]:
        return self.get_seq_mdata(name, tag)

    def seq_mutable_data_update(
        self, name: bytes, tag: int, key: bytes, value: bytes, version: int
    ) -> None:
        self.seq_mutable_data_get_value(name, tag, key)
        self.seq_mutable_data_insert(name, tag, key, value)