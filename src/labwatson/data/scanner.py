"""Directory scanning for result files."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from labwatson.constants import DEFAULT_VALID_FILETYPES

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def iter_result_files(
    folder: PathLike,
    valid_filetypes: Iterable[str] = DEFAULT_VALID_FILETYPES,
    subfolders: bool = False,
    exclude: Optional[Iterable[PathLike]] = None,
) -> Iterator[Path]:
    """Lazily yield result files in folder, sorted by name.

    Files of a directory come before the files of its subdirectories.
    Symlinked directories are not followed.

    Args:
        folder: Directory to scan
        valid_filetypes: Suffixes to accept (case-insensitive, leading '.' optional)
        subfolders: Also scan subdirectories recursively
        exclude: Files never yielded (e.g. the persisted results table)

    Yields:
        Paths of matching files

    Raises:
        FileNotFoundError: If folder is not a directory
    """
    root = Path(folder)
    if not root.is_dir():
        raise FileNotFoundError(f"Result folder not found: {root}")

    suffixes = {s.lower() if s.startswith(".") else f".{s.lower()}" for s in valid_filetypes}
    excluded = {os.path.abspath(p) for p in (exclude or ())}
    yield from _walk(root, suffixes, subfolders, excluded)


def _walk(root: Path, suffixes: set, subfolders: bool, excluded: set) -> Iterator[Path]:
    subdirs = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if subfolders and not entry.is_symlink():
                subdirs.append(entry)
            continue
        if entry.suffix.lower() not in suffixes:
            continue
        if os.path.abspath(entry) in excluded:
            logger.debug(f"Skipping excluded file {entry}")
            continue
        yield entry

    for subdir in subdirs:
        yield from _walk(subdir, suffixes, subfolders, excluded)
