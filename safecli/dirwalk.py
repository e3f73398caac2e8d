"""Walking local folders and syncing their files against a FilesMap."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from pathlib import Path

from .constants import ChangeSign, Predicate
from .errors import InvalidInput, SafeError
from .filesmap import (
    FileItem,
    FilesMap,
    ProcessedFiles,
    Uploader,
    _dest_file_name,
    gen_new_file_item,
    get_base_paths,
    get_metadata,
    normalise_path_separator,
)

log = logging.getLogger(__name__)

MAX_RECURSIVE_DEPTH = 10_000


def _walk(root: str, max_depth: int) -> Iterator[str]:
    """Yield ``root`` and the paths below it, following links.

    Hidden entries (other than the root itself) are skipped along with their
    contents, as are entries deeper than ``max_depth`` and directories that
    would lead back into one of their own ancestors.
    """
    yield root

    def children(current: str, depth: int, ancestors: frozenset[str]) -> Iterator[str]:
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as err:
            log.debug("Couldn't read directory '%s': %s", current, err)
            return
        for entry in entries:
            if entry.name.startswith("."):
                continue
            path = os.path.join(current, entry.name)
            try:
                is_dir = entry.is_dir(follow_symlinks=True)
            except OSError:
                continue
            if is_dir:
                real = os.path.realpath(path)
                if real in ancestors:
                    log.debug("Skipping '%s' as it loops back to an ancestor", path)
                    continue
                yield path
                if depth + 1 < max_depth:
                    yield from children(path, depth + 1, ancestors | {real})
            else:
                yield path

    if max_depth >= 1 and os.path.isdir(root):
        yield from children(root, 1 - 1 + 1, frozenset({os.path.realpath(root)}))


def _upload(uploader: Uploader, path: str) -> tuple[str, str]:
    try:
        return ChangeSign.ADDED.value, uploader(Path(path))
    except (SafeError, OSError) as err:
        log.info('Skipping file "%s". %s', path, err)
        return ChangeSign.ERROR.value, f"<{err}>"


def file_system_dir_walk(
    location: str, recursive: bool, uploader: Uploader | None = None
) -> ProcessedFiles:
    """List the files found at ``location``, uploading them when an uploader is given.

    Each file maps to its change sign and its link; without an uploader the
    link is empty.
    """
    metadata, _ = get_metadata(location)
    is_dir = os.path.isdir(location)
    if not is_dir and recursive:
        raise InvalidInput(
            f"'{location}' is not a directory. The \"--recursive\" arg is only "
            "supported for folders."
        )

    log.info("Reading files from %s", location)
    max_depth = MAX_RECURSIVE_DEPTH if recursive else 1
    processed: ProcessedFiles = {}
    for current in _walk(location, max_depth):
        log.info("Processing %s...", current)
        normalised = normalise_path_separator(current)
        try:
            current_is_dir = os.path.isdir(current)
            os.stat(current)
        except OSError as err:
            processed[normalised] = (ChangeSign.ERROR.value, f"<{err}>")
            log.info(
                'Skipping file "%s" since no metadata could be read from local '
                "location: %s",
                normalised,
                err,
            )
            continue
        if current_is_dir:
            continue
        if uploader is not None:
            processed[normalised] = _upload(uploader, current)
        else:
            processed[normalised] = (ChangeSign.ADDED.value, "")

    return dict(sorted(processed.items()))


def files_map_sync(
    current_files_map: Mapping[str, FileItem],
    location: str,
    new_content: Mapping[str, tuple[str, str]],
    dest_path: str | None = None,
    delete: bool = False,
    uploader: Uploader | None = None,
) -> tuple[ProcessedFiles, FilesMap, int]:
    """Compare local files with a FilesMap and build its new version.

    Returns the report of processed files, the new FilesMap and the number of
    successful changes. Files missing locally are kept unless ``delete`` is set.
    """
    location_base_path, dest_base_path = get_base_paths(location, dest_path)
    remaining: FilesMap = {name: dict(item) for name, item in current_files_map.items()}
    updated: FilesMap = {}
    processed: ProcessedFiles = {}
    success_count = 0

    for key, (change, _link) in sorted(new_content.items()):
        if change == ChangeSign.ERROR:
            continue
        metadata, file_type = get_metadata(key)
        file_size = str(metadata.st_size)
        file_name = _dest_file_name(key, location_base_path, dest_base_path)

        existing = remaining.pop(file_name, None)
        if existing is not None and (
            existing[Predicate.SIZE.value] == file_size
            and existing[Predicate.TYPE.value] == file_type
        ):
            updated[file_name] = existing
            continue

        sign = ChangeSign.ADDED if existing is None else ChangeSign.UPDATED
        created = None if existing is None else existing[Predicate.CREATED.value]
        try:
            item = gen_new_file_item(key, file_type, file_size, created, uploader)
        except (SafeError, OSError) as err:
            processed[key] = (ChangeSign.ERROR.value, f"<{err}>")
            log.info('Skipping file "%s": %s', file_name, err)
            continue
        log.debug("FileItem %s inserted as %s: %s", sign.name, file_name, item)
        updated[file_name] = item
        processed[key] = (sign.value, item[Predicate.LINK.value])
        success_count += 1

    for file_name, item in remaining.items():
        if delete:
            processed[file_name] = (ChangeSign.DELETED.value, item[Predicate.LINK.value])
            success_count += 1
        else:
            updated[file_name] = item

    return dict(sorted(processed.items())), dict(sorted(updated.items())), success_count