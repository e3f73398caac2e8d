"""FilesContainers: versioned maps of files kept in sequential append-only data."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from .dirwalk import file_system_dir_walk, files_map_sync
from .errors import (
    ContentError,
    ContentNotFound,
    EmptyContent,
    InvalidInput,
    NetDataError,
    SafeError,
    Unexpected,
    VersionNotFound,
)
from .fake_vault import FakeVault
from .filesmap import FilesMap, ProcessedFiles, files_map_create
from .primitives import xorname_to_hex

log = logging.getLogger(__name__)

FILES_CONTAINER_TYPE_TAG = 1_100

ERROR_MSG_NO_FILES_CONTAINER_FOUND = "No FilesContainer found at this address"


def _timestamp_nanos() -> bytes:
    return str(time.time_ns()).encode()


def _serialise(files_map: FilesMap) -> bytes:
    try:
        return json.dumps(files_map, sort_keys=True).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise Unexpected(f"Couldn't serialise the FilesMap generated: {err!r}") from err


def _deserialise(value: bytes) -> FilesMap:
    try:
        files_map = json.loads(value.decode("utf-8", errors="replace"))
    except ValueError as err:
        raise ContentError(
            f"Couldn't deserialise the FilesMap stored in the FilesContainer: {err!r}"
        ) from err
    if not isinstance(files_map, dict):
        raise ContentError(
            "Couldn't deserialise the FilesMap stored in the FilesContainer: "
            "not a map"
        )
    return files_map


class FilesContainers:
    """Creates, reads and syncs FilesContainers stored in a vault.

    Files are uploaded as published immutable data; each file item links to
    its data by the hex form of the data's XOR name.
    """

    def __init__(self, vault: FakeVault) -> None:
        self.vault = vault

    def _upload(self, path: Path) -> str:
        try:
            data = path.read_bytes()
        except OSError as err:
            raise InvalidInput(
                f"Failed to read file from local location: {err}"
            ) from err
        return xorname_to_hex(self.put_published_immutable(data))

    def create(
        self,
        location: str,
        dest: str | None = None,
        recursive: bool = True,
        dry_run: bool = False,
    ) -> tuple[bytes | None, ProcessedFiles, FilesMap]:
        """Upload the files at ``location`` into a new FilesContainer.

        Returns the container's XOR name (``None`` on a dry run), the report of
        processed files and the FilesMap.
        """
        uploader = None if dry_run else self._upload
        processed_files = file_system_dir_walk(location, recursive, uploader)
        files_map = files_map_create(processed_files, location, dest)

        if dry_run:
            return None, processed_files, files_map

        xorname = self.vault.put_seq_append_only_data(
            [(_timestamp_nanos(), _serialise(files_map))],
            None,
            FILES_CONTAINER_TYPE_TAG,
            None,
        )
        return xorname, processed_files, files_map

    def get(self, xorname: bytes, version: int | None = None) -> tuple[int, FilesMap]:
        """Return a version of the FilesContainer at ``xorname``, the latest by default."""
        log.debug("Getting files container from: %s", xorname_to_hex(xorname))
        try:
            if version is None:
                found_version, (_key, value) = (
                    self.vault.get_latest_seq_append_only_data(
                        xorname, FILES_CONTAINER_TYPE_TAG
                    )
                )
            else:
                try:
                    _key, value = self.vault.get_seq_append_only_data(
                        xorname, FILES_CONTAINER_TYPE_TAG, version
                    )
                except SafeError as err:
                    raise VersionNotFound(
                        f"Version '{version}' is invalid for FilesContainer found at "
                        f'"{xorname_to_hex(xorname)}"'
                    ) from err
                found_version = version
        except EmptyContent:
            log.warning(
                'FilesContainer found at "%s" was empty', xorname_to_hex(xorname)
            )
            return 0, {}
        except ContentNotFound as err:
            raise ContentNotFound(ERROR_MSG_NO_FILES_CONTAINER_FOUND) from err
        except VersionNotFound:
            raise
        except SafeError as err:
            raise NetDataError(f"Failed to get current version: {err}") from err

        log.debug("Files map retrieved.... v%s", found_version)
        return found_version, _deserialise(value)

    def sync(
        self,
        location: str,
        xorname: bytes,
        recursive: bool = True,
        delete: bool = False,
        dry_run: bool = False,
        dest_path: str | None = None,
    ) -> tuple[int, ProcessedFiles, FilesMap]:
        """Bring the FilesContainer at ``xorname`` in line with ``location``.

        Returns the new version, the report of processed files and the new
        FilesMap. A dry run reports the version it would create without
        storing anything.
        """
        if delete and not recursive:
            raise InvalidInput("'delete' is not allowed if --recursive is not set")

        current_version, current_files_map = self.get(xorname)
        local_files = file_system_dir_walk(location, recursive, None)

        processed_files, new_files_map, success_count = files_map_sync(
            current_files_map,
            location,
            local_files,
            dest_path,
            delete,
            None if dry_run else self._upload,
        )

        if success_count == 0:
            version = current_version
        elif dry_run:
            version = current_version + 1
        else:
            version = self.vault.append_seq_append_only_data(
                [(_timestamp_nanos(), _serialise(new_files_map))],
                current_version + 1,
                xorname,
                FILES_CONTAINER_TYPE_TAG,
            )

        return version, processed_files, new_files_map

    def put_published_immutable(self, data: bytes) -> bytes:
        """Store ``data`` as published immutable data and return its XOR name."""
        return self.vault.files_put_published_immutable(data)

    def get_published_immutable(self, xorname: bytes) -> bytes:
        """Return the published immutable data stored at ``xorname``."""
        return self.vault.files_get_published_immutable(xorname)