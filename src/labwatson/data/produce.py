"""Produce-or-load: reuse a saved result if it exists, compute it otherwise."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from labwatson.constants import DEFAULT_SAVE_SUFFIX
from labwatson.data import storage
from labwatson.data.tagging import tag as tag_commit
from labwatson.naming.savename import savename

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def produce_or_load(
    *args: Any,
    suffix: str = DEFAULT_SAVE_SUFFIX,
    tag: bool = False,
    project_path: Optional[PathLike] = None,
    **naming: Any,
) -> Tuple[Dict[str, Any], Path]:
    """Load the result named after config if it exists, otherwise produce it.

    Call as produce_or_load(config, f) or produce_or_load(prefix, config, f).
    The file is savename(prefix, config, suffix). If it exists it is loaded;
    otherwise f(config) is called, its result saved and returned.

    Args:
        *args: [prefix,] config, f
        suffix: File suffix, selects the storage format (default 'pkl')
        tag: Add the git commit of project_path to the saved result
        project_path: Repository searched for the commit (default: cwd)
        **naming: Passed on to savename (digits, connector, ...)

    Returns:
        Tuple of (result dictionary, file path)

    Raises:
        TypeError: If f does not return a mapping
    """
    if len(args) == 2:
        prefix = ""
        config, f = args
    elif len(args) == 3:
        prefix, config, f = args
    else:
        raise TypeError(f"produce_or_load takes 2 or 3 positional arguments, got {len(args)}")

    if prefix:
        name = savename(prefix, config, suffix, **naming)
    else:
        name = savename(config, suffix, **naming)
    path = Path(name)

    if storage.exists(path):
        logger.info(f"Loading existing result {path}")
        return storage.load(path), path

    result = f(config)
    if not isinstance(result, Mapping):
        raise TypeError(f"produce_or_load needs f to return a mapping, got {type(result).__name__}")

    data = tag_commit(result, project_path) if tag else result
    storage.save(path, data)
    logger.info(f"Produced and saved {path}")
    return dict(data), path
