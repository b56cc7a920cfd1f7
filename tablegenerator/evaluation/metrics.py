"""
Metrics for comparing heuristics over a (seed x instance x algorithm) table.

Every best/worst/tie decision on a result value or time goes through the
exact decimal ordering of ``DecimalValue``. Only the seed sums and the
deviation ratios use floats.
"""
import bisect
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from tablegenerator.config import METRIC_NAMES
from tablegenerator.data.results_table import ResultsTable

logger = logging.getLogger(__name__)


def sum_by_seeds(table: ResultsTable) -> np.ndarray:
    """Sum over seeds of each algorithm's value on each instance, shape (I, H)."""
    return table.numeric().sum(axis=0)


def max_by_seeds(table: ResultsTable) -> Tuple[np.ndarray, np.ndarray]:
    """
    Best value over seeds for each instance and algorithm, with its time.

    Among seeds reaching the same value the earliest time is kept.

    Returns:
        Tuple of (values, times), both object arrays of shape (I, H)
    """
    best = table.values[0].copy()
    best_time = table.times[0].copy()
    for s in range(1, table.n_seeds):
        for i in range(table.n_instances):
            for h in range(table.n_algorithms):
                value = table.values[s, i, h]
                time = table.times[s, i, h]
                if value > best[i, h] or (value == best[i, h] and time < best_time[i, h]):
                    best[i, h] = value
                    best_time[i, h] = time
    return best, best_time


def min_by_seeds(table: ResultsTable) -> np.ndarray:
    """Worst value over seeds for each instance and algorithm, shape (I, H)."""
    worst = table.values[0].copy()
    for s in range(1, table.n_seeds):
        for i in range(table.n_instances):
            for h in range(table.n_algorithms):
                if table.values[s, i, h] < worst[i, h]:
                    worst[i, h] = table.values[s, i, h]
    return worst


def max_by_alg(matrix: np.ndarray, times: Optional[np.ndarray] = None):
    """
    Best entry of each row (instance) across algorithms.

    A float matrix is reduced arithmetically. With ``times`` the matrix holds
    decimal values and ties are broken by the earlier time; the result is
    then a (values, times) pair of vectors.
    """
    if times is None:
        return matrix.max(axis=1)

    n_instances, n_algorithms = matrix.shape
    best = matrix[:, 0].copy()
    best_time = times[:, 0].copy()
    for i in range(n_instances):
        for h in range(1, n_algorithms):
            value = matrix[i, h]
            if value > best[i] or (value == best[i] and times[i, h] < best_time[i]):
                best[i] = value
                best_time[i] = times[i, h]
    return best, best_time


def max_by_alg_but_one(matrix: np.ndarray) -> np.ndarray:
    """
    For each instance and algorithm h, the best entry among all algorithms but h.

    With a single algorithm there is nobody to beat and the entry is -inf.
    """
    n_instances, n_algorithms = matrix.shape
    out = np.full((n_instances, n_algorithms), -np.inf)
    if n_algorithms < 2:
        return out
    for h in range(n_algorithms):
        out[:, h] = np.delete(matrix, h, axis=1).max(axis=1)
    return out


def average_rank(table: ResultsTable) -> np.ndarray:
    """
    AR(h): mean over (instance, seed) of 1 + the number of algorithms strictly better than h.

    Ties share the minimum rank, so an algorithm tied for best ranks 1.
    """
    n_algorithms = table.n_algorithms
    ranks = np.zeros(n_algorithms)
    for s in range(table.n_seeds):
        for i in range(table.n_instances):
            row = table.values[s, i]
            ordered = sorted(row)
            for h in range(n_algorithms):
                # entries after the last one equal to row[h] are strictly better
                ranks[h] += 1 + n_algorithms - bisect.bisect_right(ordered, row[h])
    return ranks / (table.n_seeds * table.n_instances)


def _deviation(numerators: np.ndarray, best: np.ndarray) -> np.ndarray:
    """1 - mean_i(numerator[i, h] / best[i]); instances with best <= 0 add nothing."""
    n_instances, n_algorithms = numerators.shape
    total = np.zeros(n_algorithms)
    for i in range(n_instances):
        den = best[i].to_float()
        if den > 0:
            total += numerators[i] / den
    return 1 - total / n_instances


def _to_float(matrix: np.ndarray) -> np.ndarray:
    return np.vectorize(lambda v: v.to_float(), otypes=[float])(matrix)


@dataclass
class Statistics:
    """Derived tables and per-algorithm metrics of one results table."""
    table: ResultsTable
    absolute_values: bool
    sum_by_seeds: np.ndarray
    max_by_alg_sum: np.ndarray
    max_by_alg_but_one_sum: np.ndarray
    max_by_seeds: np.ndarray
    time_max_by_seeds: np.ndarray
    best_by_alg: np.ndarray
    time_best_by_alg: np.ndarray
    min_by_seeds: np.ndarray
    fe_mask: np.ndarray
    fs_mask: np.ndarray
    ba_mask: np.ndarray
    eba_mask: np.ndarray
    FE: np.ndarray
    FS: np.ndarray
    BA: np.ndarray
    EBA: np.ndarray
    WD: np.ndarray
    MD: np.ndarray
    BD: np.ndarray
    AR: np.ndarray

    def mask(self, metric) -> np.ndarray:
        """Per-instance criterion (I, H) of FE, FS, BA or EBA, by name or index 0-3."""
        if isinstance(metric, str):
            name = metric.upper()
        else:
            if not 0 <= metric < len(METRIC_NAMES):
                raise ValueError(f"metric index must be between 0 and 3, got {metric}")
            name = METRIC_NAMES[metric]
        if name not in METRIC_NAMES:
            raise ValueError(f"Unknown metric {metric!r}; expected one of {', '.join(METRIC_NAMES)}")
        return getattr(self, f"{name.lower()}_mask")


def compute_statistics(table: ResultsTable, absolute_values: bool = False) -> Statistics:
    """
    Compute every derived table and metric for a results table.

    Args:
        table: Populated results table
        absolute_values: Report FE/FS/BA/EBA as counts instead of fractions

    Returns:
        Statistics
    """
    if table.n_seeds == 0 or table.n_instances == 0 or table.n_algorithms == 0:
        raise ValueError("Results table is empty: nothing to analyze")

    logger.info(f"Computing statistics for {table.n_algorithms} algorithms on "
                f"{table.n_instances} instances with {table.n_seeds} seeds")

    sums = sum_by_seeds(table)
    max_sum = max_by_alg(sums)
    but_one_sum = max_by_alg_but_one(sums)
    best, best_time = max_by_seeds(table)
    best_by_alg, time_best_by_alg = max_by_alg(best, best_time)
    worst = min_by_seeds(table)

    fe_mask = sums == max_sum[:, None]
    fs_mask = sums > but_one_sum
    ba_mask = np.array([[best[i, h] == best_by_alg[i] for h in range(table.n_algorithms)]
                        for i in range(table.n_instances)], dtype=bool)
    eba_mask = ba_mask & np.array([[best_time[i, h] == time_best_by_alg[i]
                                    for h in range(table.n_algorithms)]
                                   for i in range(table.n_instances)], dtype=bool)

    divisor = 1 if absolute_values else table.n_instances

    def share(mask):
        return mask.sum(axis=0) / divisor

    return Statistics(
        table=table,
        absolute_values=absolute_values,
        sum_by_seeds=sums,
        max_by_alg_sum=max_sum,
        max_by_alg_but_one_sum=but_one_sum,
        max_by_seeds=best,
        time_max_by_seeds=best_time,
        best_by_alg=best_by_alg,
        time_best_by_alg=time_best_by_alg,
        min_by_seeds=worst,
        fe_mask=fe_mask,
        fs_mask=fs_mask,
        ba_mask=ba_mask,
        eba_mask=eba_mask,
        FE=share(fe_mask),
        FS=share(fs_mask),
        BA=share(ba_mask),
        EBA=share(eba_mask),
        WD=_deviation(_to_float(worst), best_by_alg),
        MD=_deviation(sums / table.n_seeds, best_by_alg),
        BD=_deviation(_to_float(best), best_by_alg),
        AR=average_rank(table),
    )
