"""Pytest fixtures for labwatson tests."""

import shutil
import subprocess
import tempfile

import pytest

# Add src directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp = tempfile.mkdtemp()
    yield temp
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def git_identity(monkeypatch):
    """Give git a committer identity independent of the machine's config."""
    for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
        monkeypatch.setenv(var, "Test Author")
    for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
        monkeypatch.setenv(var, "test@example.com")


@pytest.fixture
def git_repo(temp_dir, git_identity):
    """Create a git repository with one committed file."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = Path(temp_dir) / "repo"
    repo.mkdir()
    (repo / "main.py").write_text("print('hello')\n", encoding="utf-8")
    for args in (["init"], ["add", "-A"], ["commit", "-m", "first"]):
        subprocess.run(["git", "-C", str(repo), *args], check=True, capture_output=True)
    return repo


@pytest.fixture
def simulation_params():
    """Parameter set used in the naming examples."""
    return {"a": 0.153456453, "b": 5.0, "mode": "double"}


@pytest.fixture
def sweep_template():
    """Template with two sweep axes and two constants."""
    return {"a": [1, 2], "b": 4, "run": ["bi", "tri"], "model": "linear"}
