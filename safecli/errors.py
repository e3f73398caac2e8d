"""Error types raised by the safecli API."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """The category of a :class:`SafeError`."""

    AUTH = "AuthError"
    CONNECTION = "ConnectionError"
    NET_DATA = "NetDataError"
    CONTENT_NOT_FOUND = "ContentNotFound"
    CONTENT = "ContentError"
    EMPTY_CONTENT = "EmptyContent"
    VERSION_NOT_FOUND = "VersionNotFound"
    ENTRY_NOT_FOUND = "EntryNotFound"
    ENTRY_EXISTS = "EntryExists"
    INVALID_INPUT = "InvalidInput"
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_XOR_URL = "InvalidXorUrl"
    NOT_ENOUGH_BALANCE = "NotEnoughBalance"
    FILES_SYSTEM = "FilesSystemError"
    UNEXPECTED = "Unexpected"
    UNKNOWN = "Unknown"


class SafeError(Exception):
    """Base class of every error the API raises.

    Two errors are equal when they are of the same class and carry the same message.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[Error] {self.kind.value} - {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SafeError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class AuthError(SafeError):
    kind = ErrorKind.AUTH


class SafeConnectionError(SafeError):
    kind = ErrorKind.CONNECTION


class NetDataError(SafeError):
    kind = ErrorKind.NET_DATA


class ContentNotFound(SafeError):
    kind = ErrorKind.CONTENT_NOT_FOUND


class ContentError(SafeError):
    kind = ErrorKind.CONTENT


class EmptyContent(SafeError):
    kind = ErrorKind.EMPTY_CONTENT


class VersionNotFound(SafeError):
    kind = ErrorKind.VERSION_NOT_FOUND


class EntryNotFound(SafeError):
    kind = ErrorKind.ENTRY_NOT_FOUND


class EntryExists(SafeError):
    kind = ErrorKind.ENTRY_EXISTS


class InvalidInput(SafeError):
    kind = ErrorKind.INVALID_INPUT


class InvalidAmount(SafeError):
    kind = ErrorKind.INVALID_AMOUNT


class InvalidXorUrl(SafeError):
    kind = ErrorKind.INVALID_XOR_URL


class NotEnoughBalance(SafeError):
    kind = ErrorKind.NOT_ENOUGH_BALANCE


class FilesSystemError(SafeError):
    kind = ErrorKind.FILES_SYSTEM


class Unexpected(SafeError):
    kind = ErrorKind.UNEXPECTED


class Unknown(SafeError):
    kind = ErrorKind.UNKNOWN