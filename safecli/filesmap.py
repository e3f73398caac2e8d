"""Building FilesMaps: the file items kept inside a FilesContainer."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path

from .constants import ChangeSign, Predicate
from .errors import FilesSystemError

log = logging.getLogger(__name__)

FileItem = dict[str, str]
FilesMap = dict[str, FileItem]
ProcessedFiles = dict[str, tuple[str, str]]
Uploader = Callable[[Path], str]

UNKNOWN_FILE_TYPE = "unknown"


def _timestamp_secs() -> str:
    """Current UTC time in RFC 3339 form, to the second."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _normalize_relative(path: str) -> str:
    """Resolve ``.`` and ``..`` components and drop leading and repeated slashes."""
    parts: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            else:
                parts.append(part)
        else:
            parts.append(part)
    return "/".join(parts)


def _extension(path: Path) -> str | None:
    name = path.name
    if name in ("", ".."):
        return None
    idx = name.rfind(".")
    if idx <= 0:
        return None
    return name[idx + 1 :]


def normalise_path_separator(path: str) -> str:
    """Turn Windows-style separators into ``/``."""
    return path.replace("\\", "/")


def get_base_paths(location: str, dest_path: str | None) -> tuple[str, str]:
    """Return the source base path and the destination base path.

    A trailing ``/`` on either path decides whether the location's folder
    name is kept under the destination.
    """
    location_base_path = normalise_path_separator(location)
    new_dest_path = dest_path or "/"

    if new_dest_path.endswith("/"):
        if location.endswith("/"):
            dest_base_path = new_dest_path
        else:
            dir_name = location.split("/")[-1]
            dest_base_path = f"{new_dest_path}{dir_name}"
    else:
        dest_base_path = f"{new_dest_path}/"

    return location_base_path, dest_base_path


def get_metadata(path: str | os.PathLike[str]) -> tuple[os.stat_result, str]:
    """Return the file system metadata of ``path`` and its file type.

    The file type is the extension, or ``"unknown"`` when there is none.
    """
    file_path = Path(path)
    try:
        metadata = os.stat(file_path)
    except OSError as err:
        raise FilesSystemError(
            f"Couldn't read metadata from source path ('{file_path}'): {err}"
        ) from err
    log.debug("Metadata for location: %s", metadata)
    extension = _extension(file_path)
    return metadata, extension if extension is not None else UNKNOWN_FILE_TYPE


def gen_new_file_item(
    file_path: str | os.PathLike[str],
    file_type: str,
    file_size: str,
    file_created: str | None = None,
    uploader: Uploader | None = None,
) -> FileItem:
    """Build a file item, uploading the file with ``uploader`` when given.

    Without an uploader the item's link is left empty.
    """
    now = _timestamp_secs()
    link = uploader(Path(file_path)) if uploader is not None else ""
    return {
        Predicate.LINK.value: link,
        Predicate.TYPE.value: file_type,
        Predicate.SIZE.value: file_size,
        Predicate.MODIFIED.value: now,
        Predicate.CREATED.value: file_created if file_created is not None else now,
    }


def _dest_file_name(
    file_name: str, location_base_path: str, dest_base_path: str
) -> str:
    moved = file_name.replace(location_base_path, dest_base_path)
    return "/" + normalise_path_separator(_normalize_relative(moved))


def files_map_create(
    content: Mapping[str, tuple[str, str]],
    location: str,
    dest_path: str | None = None,
) -> FilesMap:
    """Create a FilesMap from processed local files and their links.

    Files marked as errors are left out.
    """
    now = _timestamp_secs()
    location_base_path, dest_base_path = get_base_paths(location, dest_path)
    files_map: FilesMap = {}

    for file_name, (change, link) in sorted(content.items()):
        if change == ChangeSign.ERROR:
            continue
        log.debug("FileItem item name: %s", file_name)
        metadata, file_type = get_metadata(file_name)
        file_item: FileItem = {
            Predicate.LINK.value: link,
            Predicate.TYPE.value: file_type,
            Predicate.SIZE.value: str(metadata.st_size),
            Predicate.MODIFIED.value: now,
            Predicate.CREATED.value: now,
        }
        final_name = _dest_file_name(file_name, location_base_path, dest_base_path)
        log.debug("FileItem item inserted with filename %s", final_name)
        files_map[final_name] = file_item

    return dict(sorted(files_map.items()))