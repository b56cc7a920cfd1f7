"""
Name registries and the dense (seed x instance x algorithm) results table.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from tablegenerator.numeric import DecimalValue, ZERO

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int]


class NameRegistry:
    """
    Maps names to dense zero-based indices in first-seen order.

    A registry built from an inclusion list is closed: ``register`` only
    resolves names already listed and returns None for anything else.
    """

    def __init__(self, kind: str, names: Optional[Iterable[str]] = None):
        self.kind = kind
        self._index: Dict[str, int] = {}
        self._names: List[str] = []
        self.closed = names is not None
        for name in names or ():
            self._add(name)

    def _add(self, name: str) -> int:
        index = self._index.get(name)
        if index is None:
            index = len(self._names)
            self._index[name] = index
            self._names.append(name)
        return index

    def register(self, name: str) -> Optional[int]:
        """Return the index of ``name``, assigning one if the registry is open."""
        if self.closed:
            return self._index.get(name)
        return self._add(name)

    def index(self, name: str) -> int:
        return self._index[name]

    def name(self, index: int) -> str:
        return self._names[index]

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __contains__(self, name) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __repr__(self):
        return f"NameRegistry({self.kind!r}, {len(self)} names)"


@dataclass
class IngestSummary:
    """Counters reported after reading a results log."""
    rows_read: int = 0
    skipped_instances: int = 0
    skipped_algorithms: int = 0
    missing_cells: int = 0


@dataclass
class ResultsTable:
    """
    Values and elapsed times indexed by [seed, instance, algorithm].

    Both arrays hold ``DecimalValue`` objects. The table is built once by the
    ingestor and treated as read-only afterwards.
    """
    values: np.ndarray
    times: np.ndarray
    instances: NameRegistry
    algorithms: NameRegistry
    seeds: NameRegistry
    summary: IngestSummary = field(default_factory=IngestSummary)

    @classmethod
    def from_records(cls,
                     records: Dict[Cell, Tuple[DecimalValue, DecimalValue]],
                     instances: NameRegistry,
                     algorithms: NameRegistry,
                     seeds: NameRegistry,
                     summary: Optional[IngestSummary] = None) -> "ResultsTable":
        """
        Materialise a sparse map of (seed, instance, algorithm) records.

        The arrays are sized from the registries. Cells that never received a
        record keep the neutral value 0 with time 0.
        """
        shape = (len(seeds), len(instances), len(algorithms))
        values = np.full(shape, ZERO, dtype=object)
        times = np.full(shape, ZERO, dtype=object)

        for (s, i, h), (value, time) in records.items():
            values[s, i, h] = value
            times[s, i, h] = time

        summary = summary or IngestSummary()
        summary.missing_cells = int(np.prod(shape)) - len(records)
        if summary.missing_cells > 0:
            logger.warning(f"{summary.missing_cells} (seed, instance, algorithm) cells have no "
                           f"record and are treated as 0; statistics assume every algorithm "
                           f"ran every seed on every instance")

        return cls(values, times, instances, algorithms, seeds, summary)

    @property
    def n_seeds(self) -> int:
        return self.values.shape[0]

    @property
    def n_instances(self) -> int:
        return self.values.shape[1]

    @property
    def n_algorithms(self) -> int:
        return self.values.shape[2]

    def numeric(self) -> np.ndarray:
        """Float approximation of the values, for the sum and deviation metrics."""
        flat = [v.to_float() for v in self.values.ravel()]
        return np.array(flat, dtype=float).reshape(self.values.shape)
