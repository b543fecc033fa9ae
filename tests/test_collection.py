"""Tests for result scanning and collection."""

import json
import logging
import os
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from labwatson.config import CollectConfig
from labwatson.data import storage
from labwatson.data.collection import (
    ResultRecord,
    ResultTable,
    build_row,
    collect,
    collect_results,
    path_key,
)
from labwatson.data.scanner import iter_result_files
from labwatson.exceptions import LoadFailure


def write_result(folder, name, data):
    path = Path(folder) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def sims_dir(temp_dir):
    """Folder with two result files sharing one key."""
    folder = Path(temp_dir) / "sims"
    write_result(folder, "a=1.json", {"a": 1, "x": 10})
    write_result(folder, "a=2.json", {"a": 2, "y": 20})
    return folder


class TestResultTable:
    """Tests for ResultTable."""

    def test_back_fill(self):
        """New columns are back-filled and missing cells are None."""
        table = ResultTable()
        table.add_row({"path": "a.json", "x": 1})
        table.add_row({"path": "b.json", "y": 2})
        assert table.column_names == ["path", "x", "y"]
        assert table.column("x") == [1, None]
        assert table.column("y") == [None, 2]
        assert len(table) == 2

    def test_all_columns_same_length(self):
        """Every column has one entry per row."""
        table = ResultTable()
        for i, row in enumerate([{"a": 1}, {"b": 2}, {"c": 3, "a": 4}]):
            table.add_row({"path": f"{i}.json", **row})
        for name in table.column_names:
            assert len(table.column(name)) == len(table)

    def test_contains_path(self):
        """Ingested paths are found regardless of normalization."""
        table = ResultTable()
        table.add_row({"path": "data/./a.json"})
        assert "data/a.json" in table
        assert "data/b.json" not in table
        assert 5 not in table

    def test_mismatched_columns(self):
        """Columns must have equal lengths."""
        with pytest.raises(ValueError):
            ResultTable({"a": [1, 2], "b": [1]})

    def test_rows(self):
        """rows() yields one dictionary per row."""
        table = ResultTable({"path": ["a", "b"], "x": [1, None]})
        assert list(table.rows()) == [{"path": "a", "x": 1}, {"path": "b", "x": None}]

    def test_save_and_load(self, temp_dir):
        """A saved table loads back equal."""
        table = ResultTable({"path": ["a.json"], "x": [np.float64(1.5)]})
        path = table.save(os.path.join(temp_dir, "t.json"))
        loaded = ResultTable.load(path)
        assert loaded == table
        assert "a.json" in loaded

    def test_from_dict_invalid(self):
        """Stored tables need a columns mapping."""
        with pytest.raises(LoadFailure):
            ResultTable.from_dict({"rows": []})

    def test_dataframe_round_trip(self):
        """Tables convert to and from pandas DataFrames."""
        table = ResultTable({"path": ["a", "b"], "x": [1.0, None], "s": ["u", None]})
        df = table.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["path", "x", "s"]
        assert pd.isna(df["x"][1])
        assert ResultTable.from_dataframe(df) == table


class TestCollect:
    """Tests for the pure collect step."""

    def test_idempotent(self):
        """Applying the same batch twice adds nothing the second time."""
        records = [ResultRecord("a.json", {"x": 1}), ResultRecord("b.json", {"x": 2})]
        once = collect(None, records)
        twice = collect(once, records)
        assert once == twice
        assert len(twice) == 2

    def test_input_table_unchanged(self):
        """collect returns a new table."""
        table = collect(None, [ResultRecord("a.json", {"x": 1})])
        collect(table, [ResultRecord("b.json", {"x": 2})])
        assert len(table) == 1

    def test_duplicates_in_batch(self):
        """A path repeated in one batch is added once."""
        table = collect(None, [ResultRecord("a.json", {"x": 1}), ResultRecord("a.json", {"x": 2})])
        assert table.column("x") == [1]

    def test_mapping_records(self):
        """Mappings with a path entry are accepted as records."""
        table = collect(None, [{"path": "a.json", "x": 1}])
        assert table.column("path") == [path_key("a.json")]
        assert table.column("x") == [1]

    def test_mapping_without_path(self):
        """Mappings without a path are rejected."""
        with pytest.raises(ValueError):
            collect(None, [{"x": 1}])


class TestBuildRow:
    """Tests for row extraction."""

    def test_white_and_black_list(self):
        """The white list selects keys and the black list removes them."""
        record = ResultRecord("r.json", {"a": 1, "b": 2, "c": 3})
        row = build_row(record, white_list=["a", "b", "missing"], black_list=["b"])
        assert row == {"path": "r.json", "a": 1}

    def test_special_list(self):
        """Derived columns are computed from the full record."""
        record = ResultRecord("r.json", {"v": [1, 2, 3]})
        row = build_row(record, black_list=["v"], special_list=[("v_mean", lambda d: np.mean(d["v"]))])
        assert row == {"path": "r.json", "v_mean": 2.0}

    def test_failing_extractor(self, caplog):
        """A failing extractor gives None for its column only."""
        record = ResultRecord("r.json", {"a": 1})
        with caplog.at_level(logging.WARNING):
            row = build_row(record, special_list=[("bad", lambda d: d["nope"]), ("good", lambda d: d["a"] + 1)])
        assert row == {"path": "r.json", "a": 1, "bad": None, "good": 2}
        assert "bad" in caplog.text

    def test_own_path_entry(self, caplog):
        """A record's own 'path' is replaced by the file location."""
        record = ResultRecord("r.json", {"path": "elsewhere", "a": 1})
        with caplog.at_level(logging.WARNING):
            row = build_row(record)
        assert row["path"] == "r.json"
        assert "own 'path'" in caplog.text


class TestScanner:
    """Tests for iter_result_files."""

    def test_filters_and_sorts(self, temp_dir):
        """Only valid file types are yielded, sorted by name."""
        write_result(temp_dir, "b.json", {})
        write_result(temp_dir, "a.JSON", {})
        write_result(temp_dir, "c.txt", {})
        names = [p.name for p in iter_result_files(temp_dir)]
        assert names == ["a.JSON", "b.json"]

    def test_subfolders(self, temp_dir):
        """Subdirectories are only scanned on request."""
        write_result(temp_dir, "top.json", {})
        write_result(os.path.join(temp_dir, "sub"), "inner.json", {})
        assert [p.name for p in iter_result_files(temp_dir)] == ["top.json"]
        assert [p.name for p in iter_result_files(temp_dir, subfolders=True)] == ["top.json", "inner.json"]

    def test_exclude(self, temp_dir):
        """Excluded files are skipped."""
        keep = write_result(temp_dir, "keep.json", {})
        skip = write_result(temp_dir, "skip.json", {})
        assert list(iter_result_files(temp_dir, exclude=[skip])) == [keep]

    def test_symlinked_directory_not_followed(self, temp_dir):
        """A symlink back to a parent directory does not recurse."""
        write_result(os.path.join(temp_dir, "sub"), "inner.json", {})
        os.symlink(temp_dir, os.path.join(temp_dir, "sub", "loop"), target_is_directory=True)
        names = [p.name for p in iter_result_files(temp_dir, subfolders=True)]
        assert names == ["inner.json"]

    def test_missing_folder(self, temp_dir):
        """A missing folder raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            list(iter_result_files(os.path.join(temp_dir, "nope")))


class TestCollectResults:
    """Tests for collect_results."""

    def test_collects_and_persists(self, sims_dir):
        """Results are merged and saved beside the folder."""
        table = collect_results(sims_dir)
        assert len(table) == 2
        assert table.column("a") == [1, 2]
        assert table.column("x") == [10, None]
        assert table.column("y") == [None, 20]
        assert (sims_dir.parent / "results_sims.pkl").is_file()

    def test_only_new_files_loaded(self, sims_dir):
        """Files already in the table are not read again."""
        collect_results(sims_dir)
        write_result(sims_dir, "a=1.json", {"a": 100, "x": 0})
        write_result(sims_dir, "a=3.json", {"a": 3, "z": 30})
        table = collect_results(sims_dir)
        assert table.column("a") == [1, 2, 3]
        assert table.column("z") == [None, None, 30]

    def test_repeat_is_stable(self, sims_dir):
        """Collecting an unchanged folder twice gives the same table."""
        assert collect_results(sims_dir) == collect_results(sims_dir)

    def test_persistence_disabled(self, sims_dir):
        """An empty filename writes no table."""
        collect_results(sims_dir, filename="")
        assert not (sims_dir.parent / "results_sims.pkl").exists()

    def test_table_inside_folder_not_collected(self, sims_dir):
        """A table stored in the scanned folder is not treated as a result."""
        table_file = sims_dir / "table.json"
        collect_results(sims_dir, filename=str(table_file))
        table = collect_results(sims_dir, filename=str(table_file))
        assert len(table) == 2

    def test_unreadable_file_skipped(self, sims_dir, caplog):
        """Unreadable files are skipped with a warning."""
        (sims_dir / "broken.json").write_text("{oops", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            table = collect_results(sims_dir, filename="")
        assert len(table) == 2
        assert "broken.json" in caplog.text

    def test_subfolders_and_filetypes(self, sims_dir):
        """Subfolders and extra file types are included when configured."""
        storage.save(sims_dir / "deep" / "run.npz", {"a": 4})
        table = collect_results(sims_dir, filename="", subfolders=True, valid_filetypes=["json", "npz"])
        assert sorted(table.column("a")) == [1, 2, 4]

    def test_lists_from_config(self, sims_dir):
        """A CollectConfig carries white, black and special lists."""
        config = CollectConfig(
            filename="",
            black_list=["x"],
            special_list=[("double_a", lambda d: d["a"] * 2)],
        )
        table = collect_results(sims_dir, config)
        assert "x" not in table.column_names
        assert table.column("double_a") == [2, 4]

    def test_paths_are_absolute(self, sims_dir):
        """The path column records absolute file locations."""
        table = collect_results(sims_dir, filename="")
        for path in table.column("path"):
            assert os.path.isabs(path)

    def test_table_round_trips_any_value(self, temp_dir):
        """Tuples and complex values survive the persisted table unchanged."""
        folder = Path(temp_dir) / "runs"
        storage.save(folder / "a=1.pkl", {"a": 1, "shape": (2, 3), "z": 1 + 2j})
        storage.save(folder / "a=2.pkl", {"a": 2, "shape": (4,), "z": 3j})
        first = collect_results(folder, valid_filetypes=[".pkl"])
        second = collect_results(folder, valid_filetypes=[".pkl"])
        assert first == second
        assert second.column("shape") == [(2, 3), (4,)]
        assert second.column("z") == [1 + 2j, 3j]
        assert (Path(temp_dir) / "results_runs.pkl").is_file()
