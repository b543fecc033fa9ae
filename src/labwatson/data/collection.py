"""Collecting many result files into a single table.

The collection is future-proof: result files may gain or lose keys as a
project evolves. A key seen for the first time becomes a new column filled
with None for all earlier rows, and a row lacking an existing column gets
None in it. Each row remembers the file it came from in the 'path' column,
so repeated scans only load files that are not in the table yet.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

import pandas as pd

from labwatson.config import CollectConfig, SpecialEntry
from labwatson.constants import PATH_FIELD
from labwatson.data import storage
from labwatson.data.scanner import iter_result_files
from labwatson.exceptions import ExtractorFailure, LoadFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def path_key(path: PathLike) -> str:
    """Return the identity under which a result file is stored in a table."""
    return os.path.normpath(str(path))


@dataclass(frozen=True)
class ResultRecord:
    """One loaded result file.

    Attributes:
        path: Location of the file the data was loaded from
        data: The loaded result dictionary
    """

    path: str
    data: Mapping

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "ResultRecord":
        """Build a record from a mapping carrying its own 'path' entry.

        Raises:
            ValueError: If the mapping has no path
        """
        if mapping.get(PATH_FIELD) is None:
            raise ValueError(f"Result record has no '{PATH_FIELD}' entry")
        data = {k: v for k, v in mapping.items() if k != PATH_FIELD}
        return cls(path=str(mapping[PATH_FIELD]), data=data)


class ResultTable:
    """Column-oriented table of collected results.

    Columns keep the order in which keys were first seen. Missing cells
    are None. The set of ingested paths is derived from the 'path' column.

    Usage:
        table = ResultTable()
        table.add_row({"path": "a.json", "x": 1})
        table.add_row({"path": "b.json", "y": 2})
        table.column("x")  # [1, None]
    """

    def __init__(self, columns: Optional[Mapping[str, Sequence[Any]]] = None) -> None:
        """Initialize a table, optionally from existing columns.

        Raises:
            ValueError: If the columns have different lengths
        """
        self._columns: Dict[str, List[Any]] = {}
        self._n_rows = 0
        self._paths: set = set()

        if columns:
            lengths = {name: len(values) for name, values in columns.items()}
            if len(set(lengths.values())) > 1:
                raise ValueError(f"Columns have different lengths: {lengths}")
            self._columns = {str(name): list(values) for name, values in columns.items()}
            self._n_rows = next(iter(lengths.values()))
            self._paths = {
                path_key(p) for p in self._columns.get(PATH_FIELD, []) if p is not None
            }

    def __len__(self) -> int:
        return self._n_rows

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return path_key(path) in self._paths

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultTable):
            return NotImplemented
        return self._columns == other._columns

    def __repr__(self) -> str:
        return f"ResultTable(rows={self._n_rows}, columns={self.column_names})"

    @property
    def column_names(self) -> List[str]:
        """Return the column names in order of first appearance."""
        return list(self._columns)

    @property
    def paths(self) -> frozenset:
        """Return the paths of all ingested result files."""
        return frozenset(self._paths)

    def column(self, name: str) -> List[Any]:
        """Return a copy of one column.

        Raises:
            KeyError: If the column does not exist
        """
        return list(self._columns[name])

    def rows(self) -> Iterator[Dict[str, Any]]:
        """Yield each row as a dictionary over all columns."""
        for i in range(self._n_rows):
            yield {name: values[i] for name, values in self._columns.items()}

    def copy(self) -> "ResultTable":
        return ResultTable(self._columns)

    def add_row(self, row: Mapping[str, Any]) -> None:
        """Append a row, reconciling schema differences with None.

        Args:
            row: Mapping of column name to value
        """
        for key in row:
            if key not in self._columns:
                logger.debug(f"New column '{key}' back-filled for {self._n_rows} rows")
                self._columns[key] = [None] * self._n_rows

        for key, values in self._columns.items():
            values.append(row.get(key))

        self._n_rows += 1
        if row.get(PATH_FIELD) is not None:
            self._paths.add(path_key(row[PATH_FIELD]))

    def to_dict(self) -> Dict[str, Any]:
        """Return a serializable representation."""
        return {"columns": {name: list(values) for name, values in self._columns.items()}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResultTable":
        """Rebuild a table from to_dict() output.

        Raises:
            LoadFailure: If the data has no 'columns' mapping
        """
        columns = data.get("columns")
        if not isinstance(columns, Mapping):
            raise LoadFailure("Stored results table has no 'columns' mapping")
        return cls(columns)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the table as a pandas DataFrame (missing cells become NaN/None)."""
        return pd.DataFrame(self._columns, columns=self.column_names)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "ResultTable":
        """Build a table from a DataFrame, mapping missing values to None."""
        cleaned = df.astype(object).where(df.notna(), None)
        return cls({str(name): cleaned[name].tolist() for name in cleaned.columns})

    def save(self, file: PathLike) -> Path:
        """Persist the table through the artifact store."""
        path = storage.save(file, self.to_dict())
        logger.info(f"Results table with {self._n_rows} rows saved to {path}")
        return path

    @classmethod
    def load(cls, file: PathLike) -> "ResultTable":
        """Load a table persisted with save().

        Raises:
            LoadFailure: If the file cannot be read or is not a table
        """
        return cls.from_dict(storage.load(file))


def build_row(
    record: ResultRecord,
    white_list: Optional[Iterable[str]] = None,
    black_list: Iterable[str] = (),
    special_list: Iterable[SpecialEntry] = (),
) -> Dict[str, Any]:
    """Turn a loaded record into a table row.

    The white list restricts the keys used (default: all keys of the
    record), the black list then removes keys, and every special_list entry
    adds one derived value computed from the full record. A failing
    extractor yields None for its column only.

    Returns:
        Row dictionary, starting with the 'path' column
    """
    data = record.data
    if PATH_FIELD in data:
        logger.warning(
            f"{record.path} has its own '{PATH_FIELD}' entry; it is replaced by the file location"
        )

    blocked = set(black_list)
    keys = list(white_list) if white_list is not None else list(data.keys())

    row: Dict[str, Any] = {PATH_FIELD: path_key(record.path)}
    for key in keys:
        if key == PATH_FIELD or key in blocked or key not in data:
            continue
        row[key] = data[key]

    for name, extractor in special_list:
        try:
            row[name] = extractor(data)
        except Exception as e:
            failure = ExtractorFailure(f"Extractor '{name}' failed for {record.path}: {e}")
            logger.warning(str(failure))
            row[name] = None
    return row


def collect(
    table: Optional[ResultTable],
    records: Iterable[Union[ResultRecord, Mapping]],
    white_list: Optional[Iterable[str]] = None,
    black_list: Iterable[str] = (),
    special_list: Iterable[SpecialEntry] = (),
) -> ResultTable:
    """Merge new records into a copy of table.

    Records whose path is already in the table (or earlier in the same
    batch) are skipped, so applying the same batch twice adds nothing.

    Args:
        table: Existing table (None for an empty one); left unmodified
        records: ResultRecords, or mappings with a 'path' entry
        white_list: Keys to keep (default: all)
        black_list: Keys to drop
        special_list: (name, function) pairs computing derived columns

    Returns:
        The updated table
    """
    updated = table.copy() if table is not None else ResultTable()
    white = list(white_list) if white_list is not None else None
    black = list(black_list)
    special = list(special_list)

    added = 0
    for record in records:
        if not isinstance(record, ResultRecord):
            record = ResultRecord.from_mapping(record)
        if record.path in updated:
            logger.debug(f"Skipping already collected {record.path}")
            continue
        updated.add_row(build_row(record, white, black, special))
        added += 1

    logger.debug(f"Merged {added} new records ({len(updated)} rows total)")
    return updated


def _iter_new_records(
    folder: PathLike,
    config: CollectConfig,
    table: ResultTable,
    table_path: Optional[Path],
) -> Iterator[ResultRecord]:
    """Yield records for result files not yet in table, skipping unreadable ones."""
    files = iter_result_files(
        folder,
        valid_filetypes=config.valid_filetypes,
        subfolders=config.subfolders,
        exclude=[table_path] if table_path is not None else None,
    )
    for file in files:
        location = os.path.abspath(file)
        if location in table:
            continue
        try:
            data = storage.load(file)
        except LoadFailure as e:
            logger.warning(f"Skipping unreadable result file: {e}")
            continue
        yield ResultRecord(path=location, data=data)


def collect_results(
    folder: PathLike,
    config: Optional[CollectConfig] = None,
    **options: Any,
) -> ResultTable:
    """Search folder for new result files and add them to the results table.

    The table is loaded from (and saved back to) the config's filename,
    by default <parent of folder>/results_<folder name>.pkl; an empty
    filename disables persistence. Files already in the table are not
    loaded again.

    Args:
        folder: Directory holding result files
        config: Collection options
        **options: CollectConfig fields overriding config

    Returns:
        The updated table

    Example:
        >>> table = collect_results(  # doctest: +SKIP
        ...     "data/sims",
        ...     black_list=["longvector"],
        ...     special_list=[("lv_mean", lambda d: np.mean(d["longvector"]))],
        ... )
    """
    if config is None:
        config = CollectConfig(**options)
    elif options:
        config = replace(config, **options)

    table_path = config.table_path(str(folder))
    if table_path is not None and storage.exists(table_path):
        table = ResultTable.load(table_path)
        logger.info(f"Loaded results table with {len(table)} rows from {table_path}")
    else:
        table = ResultTable()

    before = len(table)
    table = collect(
        table,
        _iter_new_records(folder, config, table, table_path),
        white_list=config.white_list,
        black_list=config.black_list,
        special_list=config.special_list,
    )
    logger.info(f"Collected {len(table) - before} new results from {folder}")

    if table_path is not None:
        table.save(table_path)
    return table
