"""Tests for the command line entry point."""

import json
from pathlib import Path

import pytest

from labwatson.main import build_parser, main


def write_json(folder, name, data):
    path = Path(folder) / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestCommandLine:
    """Tests for labwatson subcommands."""

    def test_savename(self, temp_dir, capsys, simulation_params):
        """savename prints the name of a parameter file."""
        params = write_json(temp_dir, "p.json", simulation_params)
        assert main(["savename", params, "--prefix", "data/", "--suffix", "json", "--digits", "4"]) == 0
        assert capsys.readouterr().out.strip() == "data/a=0.1535_b=5_mode=double.json"

    def test_savename_kinds(self, temp_dir, capsys, simulation_params):
        """--kinds restricts the included values."""
        params = write_json(temp_dir, "p.json", simulation_params)
        assert main(["savename", params, "--kinds", "text"]) == 0
        assert capsys.readouterr().out.strip() == "mode=double"

    def test_expand(self, temp_dir, capsys, sweep_template):
        """expand prints one JSON configuration per line."""
        template = write_json(temp_dir, "t.json", sweep_template)
        assert main(["expand", template]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line) for line in lines][1] == {"a": 2, "b": 4, "run": "bi", "model": "linear"}
        assert len(lines) == 4

    def test_expand_count(self, temp_dir, capsys, sweep_template):
        """--count prints the number of configurations."""
        template = write_json(temp_dir, "t.json", sweep_template)
        assert main(["expand", template, "--count"]) == 0
        assert capsys.readouterr().out.strip() == "4"

    def test_invalid_template(self, temp_dir):
        """Malformed input exits with status 1."""
        template = write_json(temp_dir, "t.json", [1, 2])
        assert main(["expand", template]) == 1

    def test_missing_file(self, temp_dir):
        """A missing input file exits with status 1."""
        assert main(["expand", str(Path(temp_dir) / "nope.json")]) == 1

    def test_collect_csv(self, temp_dir):
        """collect writes the table as CSV."""
        folder = Path(temp_dir) / "sims"
        folder.mkdir()
        write_json(folder, "a=1.json", {"a": 1, "longvector": [1, 2]})
        write_json(folder, "a=2.json", {"a": 2})
        csv = Path(temp_dir) / "out.csv"
        assert main(["collect", str(folder), "--filename", "", "--black-list", "longvector", "--csv", str(csv)]) == 0
        header = csv.read_text(encoding="utf-8").splitlines()[0]
        assert header == "path,a"

    def test_collect_prints_rows(self, temp_dir, capsys):
        """Without --csv each row is printed as JSON."""
        folder = Path(temp_dir) / "sims"
        folder.mkdir()
        write_json(folder, "a=1.json", {"a": 1})
        assert main(["collect", str(folder)]) == 0
        rows = [json.loads(line) for line in capsys.readouterr().out.strip().splitlines()]
        assert rows[0]["a"] == 1
        assert (Path(temp_dir) / "results_sims.pkl").is_file()

    def test_init(self, temp_dir, capsys):
        """init creates a project and prints its root."""
        root = Path(temp_dir) / "study"
        assert main(["init", str(root), "--no-git", "--name", "study"]) == 0
        assert (root / "data" / "sims").is_dir()
        assert capsys.readouterr().out.strip() == str(root.resolve())

    def test_init_existing(self, temp_dir):
        """init refuses a non-empty folder without --force."""
        (Path(temp_dir) / "file.txt").write_text("x", encoding="utf-8")
        assert main(["init", temp_dir, "--no-git"]) == 1

    def test_commit_outside_repo(self, temp_dir, monkeypatch):
        """commit exits with status 1 when there is no commit."""
        monkeypatch.setenv("PATH", "")
        assert main(["commit", temp_dir]) == 1

    def test_command_required(self):
        """A subcommand is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
