# tests/conftest.py
import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(repo_root))

import matplotlib
matplotlib.use("Agg")

HEADER = "timestamp,instance,algorithm,seed,time_limit,value,elapsed_time,history"


@pytest.fixture
def write_log(tmp_path):
    """Write results rows (without header) to a log file and return its path."""
    def _write(rows, name="results.csv"):
        path = tmp_path / name
        path.write_text("\n".join([HEADER] + list(rows)) + "\n")
        return path
    return _write


@pytest.fixture
def two_by_two(write_log):
    """2 instances, 2 algorithms, 1 seed: a2 wins i1, both tie on i2."""
    return write_log([
        "2024-01-01,i1,a1,s1,10,10,1.0",
        "2024-01-01,i1,a2,s1,10,20,1.0",
        "2024-01-01,i2,a1,s1,10,30,1.0",
        "2024-01-01,i2,a2,s1,10,30,1.0",
    ])
