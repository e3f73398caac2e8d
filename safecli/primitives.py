"""Coins, keys, XOR names and mutable data values."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .errors import InvalidAmount, InvalidInput

XOR_NAME_LEN = 32
_NANOS_PER_COIN = 1_000_000_000
_DECIMALS = 9
_MAX_NANOS = 2**64 - 1
_AMOUNT_RE = re.compile(r"([0-9]+)(?:\.([0-9]*))?")


@dataclass(frozen=True, order=True)
class Coins:
    """An amount of safecoin held as whole nano-coins."""

    nanos: int

    def __post_init__(self) -> None:
        if not 0 <= self.nanos <= _MAX_NANOS:
            raise OverflowError(f"coin amount out of range: {self.nanos}")

    @classmethod
    def from_str(cls, text: str) -> Coins:
        """Parse an amount such as ``"2.345678912"``."""
        match = _AMOUNT_RE.fullmatch(text.strip())
        if match is None:
            raise InvalidAmount(f"Invalid safecoins amount '{text}'")
        units, fraction = match.group(1), match.group(2) or ""
        if len(fraction) > _DECIMALS:
            raise InvalidAmount(
                f"Invalid safecoins amount '{text}', "
                f"it must have at most {_DECIMALS} decimal places"
            )
        nanos = int(units) * _NANOS_PER_COIN + int(fraction.ljust(_DECIMALS, "0"))
        if nanos > _MAX_NANOS:
            raise InvalidAmount(f"Invalid safecoins amount '{text}', it is too large")
        return cls(nanos)

    def __str__(self) -> str:
        units, remainder = divmod(self.nanos, _NANOS_PER_COIN)
        fraction = f"{remainder:0{_DECIMALS}d}".rstrip("0")
        return f"{units}.{fraction}" if fraction else str(units)

    def __add__(self, other: Coins) -> Coins:
        if not isinstance(other, Coins):
            return NotImplemented
        total = self.nanos + other.nanos
        if total > _MAX_NANOS:
            raise OverflowError("coin addition overflowed")
        return Coins(total)

    def __sub__(self, other: Coins) -> Coins:
        if not isinstance(other, Coins):
            return NotImplemented
        if other.nanos > self.nanos:
            raise OverflowError("coin subtraction underflowed")
        return Coins(self.nanos - other.nanos)


@dataclass(frozen=True)
class PublicKey:
    """A 32-byte public key."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != XOR_NAME_LEN:
            raise InvalidInput(
                f"A public key must be {XOR_NAME_LEN} bytes long, got {len(self.raw)}"
            )

    def to_hex(self) -> str:
        return self.raw.hex()

    @classmethod
    def from_hex(cls, text: str) -> PublicKey:
        try:
            raw = bytes.fromhex(text)
        except ValueError as err:
            raise InvalidInput(f"Invalid public key hex string '{text}': {err}") from err
        return cls(raw)


@dataclass(frozen=True)
class SecretKey:
    """A secret signing key."""

    _key: Ed25519PrivateKey = field(repr=False, compare=False)

    @classmethod
    def random(cls) -> SecretKey:
        return cls(Ed25519PrivateKey.generate())

    def public_key(self) -> PublicKey:
        raw = self._key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return PublicKey(raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretKey):
            return NotImplemented
        return self.public_key() == other.public_key()

    def __hash__(self) -> int:
        return hash(self.public_key())


@dataclass(frozen=True)
class MDataValue:
    """A value stored in mutable data, with its entry version."""

    data: bytes
    version: int = 0


def xorname_from_pk(pk: PublicKey) -> bytes:
    """Return the XOR name addressing data owned by ``pk``."""
    return pk.raw[:XOR_NAME_LEN]


def xorname_to_hex(xorname: bytes) -> str:
    return xorname.hex()


def random_xorname() -> bytes:
    return os.urandom(XOR_NAME_LEN)