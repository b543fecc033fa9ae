"""Configuration dataclasses for labwatson."""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Tuple

from labwatson.constants import (
    DEFAULT_CONNECTOR,
    DEFAULT_DIGITS,
    DEFAULT_VALID_FILETYPES,
    PICKLE_SUFFIX,
    RESULTS_TABLE_PREFIX,
)
from labwatson.exceptions import InvalidPolicy
from labwatson.models import ValueKind, parse_kind

# (column name, function of the loaded record)
SpecialEntry = Tuple[str, Callable[[Any], Any]]


@dataclass(frozen=True)
class NamingPolicy:
    """Options controlling savename.

    allowed_kinds and accesses default to None, meaning "ask the container"
    (default_allowed / all_access), so one policy can serve containers with
    different adapters.
    """

    allowed_kinds: Optional[Tuple[ValueKind, ...]] = None
    accesses: Optional[Tuple[str, ...]] = None
    digits: int = DEFAULT_DIGITS
    connector: str = DEFAULT_CONNECTOR
    prefix: str = ""
    suffix: str = ""

    def __post_init__(self) -> None:
        # bool is an int, but digits=True is never what the caller meant
        if isinstance(self.digits, bool) or not isinstance(self.digits, int):
            raise InvalidPolicy(f"digits must be an integer, got {self.digits!r}")
        if self.digits < 0:
            raise InvalidPolicy(f"digits must be non-negative, got {self.digits}")
        if not isinstance(self.connector, str) or not self.connector:
            raise InvalidPolicy(f"connector must be a non-empty string, got {self.connector!r}")
        if not isinstance(self.prefix, str) or not isinstance(self.suffix, str):
            raise InvalidPolicy("prefix and suffix must be strings")

        if self.allowed_kinds is not None:
            try:
                kinds = tuple(parse_kind(kind) for kind in _as_sequence(self.allowed_kinds))
            except ValueError as e:
                raise InvalidPolicy(f"Unknown value kind in allowed_kinds: {e}") from e
            # Use object.__setattr__ because frozen=True
            object.__setattr__(self, "allowed_kinds", kinds)

        if self.accesses is not None:
            object.__setattr__(self, "accesses", tuple(_as_sequence(self.accesses)))

    def with_overrides(self, **overrides: Any) -> "NamingPolicy":
        """Return a copy with the given (non-None) fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidPolicy(f"Unknown naming options: {sorted(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


@dataclass(frozen=True)
class CollectConfig:
    """Options for collect_results.

    filename: where the table is loaded from and saved to. None derives
        <parent>/results_<folder>.pkl; "" disables persistence.
    subfolders: also scan subdirectories
    valid_filetypes: suffixes interpreted as result files
    white_list: keys to keep from each record (None keeps all)
    black_list: keys to drop after the white list is applied
    special_list: (name, function) pairs computing derived columns
    """

    filename: Optional[str] = None
    subfolders: bool = False
    valid_filetypes: Tuple[str, ...] = DEFAULT_VALID_FILETYPES
    white_list: Optional[Tuple[str, ...]] = None
    black_list: Tuple[str, ...] = ()
    special_list: Tuple[SpecialEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        filetypes = tuple(_normalize_suffix(s) for s in _as_sequence(self.valid_filetypes))
        if not filetypes:
            raise ValueError("valid_filetypes cannot be empty")
        object.__setattr__(self, "valid_filetypes", filetypes)

        if self.white_list is not None:
            object.__setattr__(self, "white_list", tuple(_as_sequence(self.white_list)))
        object.__setattr__(self, "black_list", tuple(_as_sequence(self.black_list)))

        special = self.special_list
        if hasattr(special, "items"):
            special = special.items()
        entries = tuple(tuple(entry) for entry in special)
        for entry in entries:
            if len(entry) != 2 or not isinstance(entry[0], str) or not callable(entry[1]):
                raise ValueError(
                    f"special_list entries must be (name, callable) pairs, got {entry!r}"
                )
        object.__setattr__(self, "special_list", entries)

    def table_path(self, folder: str) -> Optional[Path]:
        """Return the path of the persisted table for folder, or None if disabled."""
        if self.filename is None:
            folder_path = Path(os.path.abspath(folder))
            return folder_path.parent / f"{RESULTS_TABLE_PREFIX}{folder_path.name}{PICKLE_SUFFIX}"
        if self.filename == "":
            return None
        return Path(self.filename)


@dataclass(frozen=True)
class ProjectLayout:
    """Subdirectory names of a project, relative to its root."""

    data: str = "data"
    sims: str = "data/sims"
    exp_raw: str = "data/exp_raw"
    exp_pro: str = "data/exp_pro"
    plots: str = "plots"
    scripts: str = "scripts"
    src: str = "src"
    papers: str = "papers"
    notebooks: str = "notebooks"
    videos: str = "videos"
    research: str = "_research"

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not value or os.path.isabs(value):
                raise ValueError(f"Layout entry '{f.name}' must be a non-empty relative path, got {value!r}")


def _as_sequence(value: Any) -> Iterable[Any]:
    """Treat a lone string as a one-element sequence."""
    if isinstance(value, (str, ValueKind)):
        return (value,)
    return value


def _normalize_suffix(suffix: str) -> str:
    suffix = suffix.lower()
    return suffix if suffix.startswith(".") else f".{suffix}"
