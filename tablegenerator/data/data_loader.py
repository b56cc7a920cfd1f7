"""
Utilities for loading results logs and name lists.
"""
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import pandas as pd

from tablegenerator.data.history import parse_history, replay_history
from tablegenerator.data.results_table import Cell, IngestSummary, NameRegistry, ResultsTable
from tablegenerator.numeric import DecimalValue

logger = logging.getLogger(__name__)

LOG_COLUMNS = ["timestamp", "instance", "algorithm", "seed",
               "time_limit", "value", "elapsed_time", "history"]

PathLike = Union[str, Path]


class ResultsFormatError(ValueError):
    """A row of the results log cannot be interpreted."""

    def __init__(self, path, line: int, message: str):
        super().__init__(f"{path}, line {line}: {message}")
        self.path = path
        self.line = line


class CoverageError(ValueError):
    """Names from an inclusion list never appear in the results log."""

    def __init__(self, results_file, missing_instances: Sequence[str] = (),
                 missing_algorithms: Sequence[str] = ()):
        self.missing_instances = sorted(missing_instances)
        self.missing_algorithms = sorted(missing_algorithms)
        parts = []
        if self.missing_instances:
            parts.append(f"instances {', '.join(self.missing_instances)}")
        if self.missing_algorithms:
            parts.append(f"algorithms {', '.join(self.missing_algorithms)}")
        super().__init__(f"The following listed {' and '.join(parts)} "
                         f"do not appear in {results_file}")


def read_name_list(path: PathLike) -> List[str]:
    """
    Read an inclusion list: one name per line.

    Blank lines and lines starting with '#' are ignored, so an entry can be
    disabled by commenting it out. Duplicates are reported once.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(path)

    names = []
    seen = set()
    with open(path, "r", newline="") as f:
        for line in f:
            name = line.rstrip("\n").strip(" ")
            name = name.split("\r", 1)[0]
            if not name or name.startswith("#"):
                continue
            if name not in seen:
                seen.add(name)
                names.append(name)
    return names


def _is_blank(row: Sequence) -> bool:
    return all(not isinstance(field, str) or not field.strip() for field in row)


class ResultsIngestor:
    """
    Reads a results log into a ``ResultsTable``.

    The ingestor owns the three name registries. Passing an inclusion list
    for instances or algorithms closes the matching registry: rows naming
    anything else are skipped and counted.
    """

    def __init__(self,
                 instances: Optional[Sequence[str]] = None,
                 algorithms: Optional[Sequence[str]] = None,
                 time_scaling: float = 1.0,
                 entry_separator: str = ";",
                 pair_separator: str = ":",
                 chunksize: int = 100_000):
        if not 0.0 < time_scaling <= 1.0:
            raise ValueError(f"time scaling must be > 0 and <= 1.0, got {time_scaling}")

        self.instances = NameRegistry("instance", instances)
        self.algorithms = NameRegistry("algorithm", algorithms)
        self.seeds = NameRegistry("seed")
        self.time_scaling = time_scaling
        self.entry_separator = entry_separator
        self.pair_separator = pair_separator
        self.chunksize = chunksize

        self.records: Dict[Cell, Tuple[DecimalValue, DecimalValue]] = {}
        self.summary = IngestSummary()
        self._seen_instances: Set[int] = set()
        self._seen_algorithms: Set[int] = set()
        self._line = 0

    def _read_chunks(self, path: Path):
        # fields past the history are ignored; blank lines are kept so that
        # row positions stay equal to file lines
        try:
            reader = pd.read_csv(path, header=None, skiprows=1, names=LOG_COLUMNS,
                                 usecols=range(len(LOG_COLUMNS)), index_col=False,
                                 dtype=str, keep_default_na=False,
                                 skip_blank_lines=False,
                                 chunksize=self.chunksize)
            for chunk in reader:
                yield chunk
        except pd.errors.EmptyDataError:
            return
        except pd.errors.ParserError as exc:
            match = re.search(r"line (\d+)", str(exc))
            line = int(match.group(1)) if match else self._line + 1
            raise ResultsFormatError(path, line, f"malformed log: {exc}") from exc

    def _resolve(self, path, line, row) -> Tuple[DecimalValue, DecimalValue]:
        _, _, _, _, time_limit, value, elapsed, history = row
        try:
            limit = float(time_limit) * self.time_scaling
            value = DecimalValue(value)
            elapsed = DecimalValue(elapsed)
            if isinstance(history, str) and history.strip():
                entries = parse_history(history, self.entry_separator, self.pair_separator)
                if entries:
                    value, elapsed = replay_history(entries, limit)
        except (TypeError, ValueError) as exc:
            raise ResultsFormatError(path, line, str(exc)) from exc
        return value, elapsed

    def add_row(self, path, line: int, row: Sequence) -> bool:
        """Register one log row. Returns False if the row was filtered out."""
        instance, algorithm, seed = row[1], row[2], row[3]

        if self.instances.closed and instance not in self.instances:
            self.summary.skipped_instances += 1
            return False
        if self.algorithms.closed and algorithm not in self.algorithms:
            self.summary.skipped_algorithms += 1
            return False

        value, elapsed = self._resolve(path, line, row)
        inst = self.instances.register(instance)
        algo = self.algorithms.register(algorithm)
        seed_index = self.seeds.register(seed)
        self._seen_instances.add(inst)
        self._seen_algorithms.add(algo)
        # a repeated (seed, instance, algorithm) triple overwrites the earlier one
        self.records[(seed_index, inst, algo)] = (value, elapsed)
        return True

    def check_coverage(self, path) -> None:
        missing_instances = []
        missing_algorithms = []
        if self.instances.closed:
            missing_instances = [name for idx, name in enumerate(self.instances)
                                 if idx not in self._seen_instances]
        if self.algorithms.closed:
            missing_algorithms = [name for idx, name in enumerate(self.algorithms)
                                  if idx not in self._seen_algorithms]
        if missing_instances or missing_algorithms:
            raise CoverageError(path, missing_instances, missing_algorithms)

    def ingest(self, path: PathLike) -> ResultsTable:
        """Read the whole log and build the results table."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(path)

        # the header occupies line 1
        self._line = 1
        for chunk in self._read_chunks(path):
            for row in chunk.itertuples(index=False, name=None):
                self._line += 1
                if _is_blank(row):
                    continue
                self.summary.rows_read += 1
                self.add_row(path, self._line, row)

        self.check_coverage(path)

        logger.info(f"Read {self.summary.rows_read} records from {path}")
        logger.info(f"{self.summary.skipped_instances} were skipped because of uninteresting instances")
        logger.info(f"{self.summary.skipped_algorithms} were skipped because of uninteresting algorithms")

        return ResultsTable.from_records(self.records, self.instances, self.algorithms,
                                         self.seeds, self.summary)


def load_results(results_file: PathLike,
                 instance_list: Optional[PathLike] = None,
                 algorithm_list: Optional[PathLike] = None,
                 time_scaling: float = 1.0,
                 **kwargs) -> ResultsTable:
    """
    Load a results log, optionally restricted to listed instances/algorithms.

    Args:
        results_file: Path to the delimited results log
        instance_list: Optional file of instance names to keep
        algorithm_list: Optional file of algorithm names to keep
        time_scaling: Factor in (0, 1] applied to every time limit
        **kwargs: Passed on to ``ResultsIngestor``

    Returns:
        The populated ResultsTable
    """
    instances = read_name_list(instance_list) if instance_list else None
    algorithms = read_name_list(algorithm_list) if algorithm_list else None
    ingestor = ResultsIngestor(instances, algorithms, time_scaling=time_scaling, **kwargs)
    return ingestor.ingest(results_file)
