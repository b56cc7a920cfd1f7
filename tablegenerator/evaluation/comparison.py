"""
Utilities for reporting the comparison of heuristics.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from tablegenerator.config import TABLE_COLUMNS
from tablegenerator.data.results_table import ResultsTable
from tablegenerator.evaluation.metrics import Statistics

logger = logging.getLogger(__name__)


class UnknownAlgorithmError(KeyError):
    """An algorithm name has no registry index or no display name."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


def read_name_translations(path) -> Dict[str, str]:
    """
    Read the abbreviation -> display name table.

    Each line is split at its first comma. A line without a comma or a
    repeated abbreviation is an error.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(path)

    names: Dict[str, str] = {}
    with open(path, "r") as f:
        for n_line, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            key, sep, value = line.partition(",")
            if not sep:
                raise ValueError(f"Error at line {n_line} of {path}: {line}")
            if key in names:
                raise ValueError(f"Error at line {n_line} of {path}: duplicate name {key}")
            names[key] = value
    return names


def sort_algorithms(stats: Statistics) -> List[int]:
    """
    Algorithm indices in reporting order.

    Composite key, all descending: FE, then -MD (smaller mean deviation
    first), then registration index.
    """
    return sorted(range(stats.table.n_algorithms),
                  key=lambda h: (stats.FE[h], -stats.MD[h], h),
                  reverse=True)


def _format_row(stats: Statistics, h: int) -> List[str]:
    if stats.absolute_values:
        counts = [f"{stats.FE[h]:.0f}", f"{stats.FS[h]:.0f}", f"{stats.BA[h]:.0f}", f"{stats.EBA[h]:.0f}"]
    else:
        counts = [f"{stats.FE[h] * 100:.1f}", f"{stats.FS[h] * 100:.1f}",
                  f"{stats.BA[h] * 100:.1f}", f"{stats.EBA[h] * 100:.1f}"]
    deviations = [f"{stats.WD[h] * 100:.2f}", f"{stats.MD[h] * 100:.2f}", f"{stats.BD[h] * 100:.2f}"]
    return counts + deviations + [f"{stats.AR[h]:.1f}"]


def comparison_table(stats: Statistics, translations: Dict[str, str]) -> pd.DataFrame:
    """
    Build the sorted statistics table.

    Args:
        stats: Computed statistics
        translations: Mapping from algorithm name in the log to display name

    Returns:
        DataFrame of formatted strings with columns Heuristic, FE, ..., AR
    """
    rows = []
    for h in sort_algorithms(stats):
        name = stats.table.algorithms.name(h)
        if name not in translations:
            raise UnknownAlgorithmError(f"No display name for algorithm {name}")
        rows.append([translations[name]] + _format_row(stats, h))
    return pd.DataFrame(rows, columns=list(TABLE_COLUMNS))


def write_table(frame: pd.DataFrame, path) -> None:
    frame.to_csv(path, index=False)
    logger.info(f"Statistics written to {path}")


def write_instance_list(names: Iterable[str], path) -> None:
    """Write one instance name per line."""
    with open(path, "w") as f:
        for name in names:
            f.write(f"{name}\n")


def extract_difficult(table: ResultsTable, level: Optional[int] = None) -> Tuple[List[str], int]:
    """
    Select instances whose best value is reached by few algorithms.

    An algorithm counts as reaching the best of an instance only if every
    one of its seeds does. Instances where more than ``level`` algorithms
    (default: half of them) reach the best are rejected as easy.

    Returns:
        Tuple of (accepted instance names, number of rejected instances)
    """
    threshold = table.n_algorithms / 2.0 if level is None else level
    accepted = []
    rejected = 0

    for i, instance in enumerate(table.instances):
        cells = table.values[:, i, :]
        best = max(cells.ravel())
        count = sum(1 for h in range(table.n_algorithms)
                    if all(value == best for value in cells[:, h]))
        if count > threshold:
            rejected += 1
        else:
            accepted.append(instance)

    logger.info(f"Rejected: {rejected}")
    logger.info(f"Accepted: {len(accepted)}")
    return accepted, rejected


def extract_champions(stats: Statistics, algorithm: str, metric=0) -> List[str]:
    """
    Instances on which ``algorithm`` meets the per-instance criterion of a metric.

    Args:
        stats: Computed statistics
        algorithm: Algorithm name as it appears in the log
        metric: 0/"FE", 1/"FS", 2/"BA" or 3/"EBA"

    Returns:
        Instance names in registry order
    """
    registry = stats.table.algorithms
    if algorithm not in registry:
        raise UnknownAlgorithmError(f"Algorithm {algorithm} does not exist")
    h = registry.index(algorithm)
    column = stats.mask(metric)[:, h]

    accepted = [name for i, name in enumerate(stats.table.instances) if column[i]]
    logger.info(f"Rejected: {stats.table.n_instances - len(accepted)}")
    logger.info(f"Accepted: {len(accepted)}")
    return accepted
