"""File-backed artifact store for result dictionaries.

The format is picked from the file suffix:
    .json  - human readable; numpy values are converted to plain Python
    .npz   - numpy archive; one array per key, 0-d arrays load as scalars
    .pkl   - pickle; round-trips arbitrary Python values

Loading .pkl and .npz files can run pickled code, so only load results
from folders you trust.

Every loader returns a plain dict so callers never depend on the format.
"""

import enum
import json
import logging
import pickle
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict, Union

import numpy as np

from labwatson.constants import JSON_SUFFIX, NPZ_SUFFIX, PICKLE_SUFFIX
from labwatson.exceptions import LoadFailure, UnsupportedFormat

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def json_default(obj: Any) -> Any:
    """Convert values the json module cannot serialize on its own."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    if isinstance(obj, enum.Enum):
        return obj.name
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _save_json(path: Path, data: Mapping) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dict(data), f, indent=2, ensure_ascii=False, default=json_default)


def _load_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise LoadFailure(f"{path} does not contain a JSON object")
    return data


def _save_npz(path: Path, data: Mapping) -> None:
    arrays = {str(key): np.asarray(value) for key, value in data.items()}
    with open(path, "wb") as f:
        np.savez(f, **arrays)


def _load_npz(path: Path) -> Dict[str, Any]:
    result = {}
    with np.load(path, allow_pickle=True) as archive:
        for key in archive.files:
            array = archive[key]
            result[key] = array.item() if array.ndim == 0 else array
    return result


def _save_pickle(path: Path, data: Mapping) -> None:
    with open(path, "wb") as f:
        pickle.dump(dict(data), f)


def _load_pickle(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        data = pickle.load(f)
    if not isinstance(data, Mapping):
        raise LoadFailure(f"{path} does not contain a mapping")
    return dict(data)


_WRITERS: Dict[str, Callable[[Path, Mapping], None]] = {
    JSON_SUFFIX: _save_json,
    NPZ_SUFFIX: _save_npz,
    PICKLE_SUFFIX: _save_pickle,
}

_READERS: Dict[str, Callable[[Path], Dict[str, Any]]] = {
    JSON_SUFFIX: _load_json,
    NPZ_SUFFIX: _load_npz,
    PICKLE_SUFFIX: _load_pickle,
}


def exists(file: PathLike) -> bool:
    """Check whether an artifact exists at file."""
    return Path(file).is_file()


def save(file: PathLike, data: Mapping) -> Path:
    """Save a result dictionary, creating parent directories as needed.

    Args:
        file: Destination; its suffix selects the format
        data: Mapping to persist

    Returns:
        The path written to

    Raises:
        UnsupportedFormat: If no writer handles the suffix
        TypeError: If data is not a mapping
    """
    path = Path(file)
    writer = _WRITERS.get(path.suffix.lower())
    if writer is None:
        raise UnsupportedFormat(
            f"Cannot save '{path}': unsupported suffix '{path.suffix}' "
            f"(use one of {sorted(_WRITERS)})"
        )
    if not isinstance(data, Mapping):
        raise TypeError(f"Only mappings can be saved, got {type(data).__name__}")

    path.parent.mkdir(parents=True, exist_ok=True)
    writer(path, data)
    logger.debug(f"Saved {len(data)} fields to {path}")
    return path


def load(file: PathLike) -> Dict[str, Any]:
    """Load a result dictionary.

    Raises:
        UnsupportedFormat: If no reader handles the suffix
        LoadFailure: If the file is missing or cannot be parsed
    """
    path = Path(file)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedFormat(f"Cannot load '{path}': unsupported suffix '{path.suffix}'")
    try:
        return reader(path)
    except LoadFailure:
        raise
    except Exception as e:
        raise LoadFailure(f"Failed to load {path}: {e}") from e
