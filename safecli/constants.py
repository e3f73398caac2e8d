"""Change markers and file item predicates used by FilesContainers."""

from __future__ import annotations

from enum import Enum


class ChangeSign(str, Enum):
    """Marks how a file was processed."""

    ADDED = "+"
    UPDATED = "*"
    DELETED = "-"
    ERROR = "E"

    def __str__(self) -> str:
        return self.value


class Predicate(str, Enum):
    """Keys of the metadata kept for each file item."""

    LINK = "link"
    TYPE = "type"
    SIZE = "size"
    MODIFIED = "modified"
    CREATED = "created"

    def __str__(self) -> str:
        return self.value