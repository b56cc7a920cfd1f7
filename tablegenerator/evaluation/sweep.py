"""
Statistics as a function of the allowed running time.

Every step reruns the whole pipeline with time limits scaled by k/steps,
so each point reflects what the histories had reached by then.
"""
import logging
import re
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from tablegenerator.config import ParameterFile
from tablegenerator.data.data_loader import read_name_list, ResultsIngestor
from tablegenerator.evaluation.comparison import comparison_table
from tablegenerator.evaluation.metrics import compute_statistics

logger = logging.getLogger(__name__)


def scaling_sweep(parameters: ParameterFile,
                  steps: int,
                  translations: Dict[str, str],
                  metric: str = "FE",
                  absolute_values: bool = False,
                  **ingest_kwargs) -> pd.DataFrame:
    """
    Compute one table column for the scaling factors 1/steps, 2/steps, ..., 1.

    Args:
        parameters: Parsed parameter file
        steps: Number of scaling factors
        translations: Algorithm display names
        metric: Column of the comparison table to collect
        absolute_values: Report counts instead of percentages
        **ingest_kwargs: Passed on to ``ResultsIngestor``

    Returns:
        Long-form DataFrame with columns step, scaling, Heuristic, <metric>
    """
    if steps < 1:
        raise ValueError("steps must be >= 1")

    instances = read_name_list(parameters.instance_list) if parameters.instance_list else None
    algorithms = read_name_list(parameters.algorithm_list) if parameters.algorithm_list else None

    frames = []
    for step in range(1, steps + 1):
        scaling = step / steps
        logger.info(f"Sweep step {step}/{steps}: time scaling {scaling:.3f}")

        ingestor = ResultsIngestor(instances, algorithms, time_scaling=scaling, **ingest_kwargs)
        table = ingestor.ingest(parameters.results_file)
        stats = compute_statistics(table, absolute_values=absolute_values)
        frame = comparison_table(stats, translations)[["Heuristic", metric]].copy()
        frame.insert(0, "scaling", scaling)
        frame.insert(0, "step", step)
        frames.append(frame)

    result = pd.concat(frames, ignore_index=True)
    result[metric] = result[metric].astype(float)
    return result


def _safe_filename(name: str) -> str:
    return re.sub(r"[^\w.+-]", "_", name)


def write_plot_data(frame: pd.DataFrame, metric: str, directory="results") -> Dict[str, Path]:
    """
    Write one ``<Heuristic>.dat`` file per algorithm with ``step value`` lines.

    Returns:
        Mapping from heuristic name to the file written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = {}
    for heuristic, group in frame.groupby("Heuristic", sort=False):
        path = directory / f"{_safe_filename(str(heuristic))}.dat"
        with open(path, "w") as f:
            for step, value in zip(group["step"], group[metric]):
                f.write(f"{step} {value}\n")
        written[heuristic] = path

    logger.info(f"Wrote {len(written)} plot data files to {directory}")
    return written
