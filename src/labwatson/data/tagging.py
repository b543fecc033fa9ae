"""Tagging results with the git commit of the code that produced them.

None of these functions raise when git information is unavailable: they are
called while saving results, and a missing tag must never cost the data.
"""

import logging
import shutil
import subprocess
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Optional, Union

from labwatson.constants import COMMIT_FIELD, DIRTY_SUFFIX
from labwatson.data import storage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def run_git(path: Path, *args: str) -> str:
    """Run a git command in path and return its stripped stdout."""
    result = subprocess.run(
        ["git", "-C", str(path), *args],
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def current_commit(path: Optional[PathLike] = None) -> Optional[str]:
    """Return the current commit id of the git repository at path.

    If the work tree has uncommitted changes, the id ends with '_dirty'.

    Args:
        path: Directory inside the repository (default: current directory)

    Returns:
        The commit id, or None if it cannot be determined

    Example:
        >>> current_commit("path/to/dirty/repo")  # doctest: +SKIP
        '3bf684c6a115e3dce484b7f200b66d3ced8b0832_dirty'
    """
    repo = Path(path) if path is not None else Path.cwd()
    if shutil.which("git") is None:
        logger.warning("git executable not found; results will not be tagged")
        return None

    try:
        commit = run_git(repo, "rev-parse", "HEAD")
        status = run_git(repo, "status", "--porcelain", "--untracked-files=no")
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Could not read git commit of {repo}: {e}")
        return None

    if status:
        commit += DIRTY_SUFFIX
    return commit


def tag(d: Mapping, path: Optional[PathLike] = None, field: str = COMMIT_FIELD) -> Mapping:
    """Add the current commit under field, unless the field already exists.

    Mutable mappings are tagged in place and returned; other mappings are
    copied into a new dict.

    Args:
        d: Result mapping to tag
        path: Directory of the git repository (default: current directory)
        field: Reserved field name holding the commit

    Returns:
        The tagged mapping
    """
    if field in d:
        logger.debug(f"'{field}' already present; leaving it untouched")
        return d

    commit = current_commit(path)
    if commit is None:
        return d

    target: Any = d if isinstance(d, MutableMapping) else dict(d)
    target[field] = commit
    return target


def tagsave(file: PathLike, d: Mapping, path: Optional[PathLike] = None) -> Path:
    """Tag d with the commit of the repository at path, then save it to file.

    Returns:
        The path written to
    """
    tagged = tag(d, path)
    return storage.save(file, tagged)
