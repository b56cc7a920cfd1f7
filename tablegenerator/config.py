"""
Run configuration and the legacy parameter file.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

METRIC_NAMES = ("FE", "FS", "BA", "EBA")
TABLE_COLUMNS = ("Heuristic", "FE", "FS", "BA", "EBA", "WD", "MD", "BD", "AR")


class ConfigurationError(ValueError):
    """Invalid, missing or incompatible options."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass
class ParameterFile:
    """Contents of a parameter file."""
    results_file: str
    output_file: str
    instance_list: Optional[str] = None
    algorithm_list: Optional[str] = None


def read_parameters(path) -> ParameterFile:
    """
    Read a parameter file.

    The file holds whitespace-separated tokens in this strict order, possibly
    over several lines:
      - name of the results file
      - "all_instances", or "some_instances" followed by an instance list file
      - "all_algorithms", or "some_algorithms" followed by an algorithm list file
      - name of the output file for the statistics
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(path)

    tokens = path.read_text().split()
    tokens.reverse()

    def take(what):
        if not tokens:
            raise ConfigurationError(f"{what} missing in parameter file {path}")
        return tokens.pop()

    results_file = take("Results file name")

    instance_list = None
    instance_set = take('String "all_instances" or "some_instances"')
    if instance_set == "some_instances":
        instance_list = take("Instance list file name")
    elif instance_set != "all_instances":
        raise ConfigurationError(f'String "all_instances" or "some_instances" missing in '
                                 f'parameter file {path}')

    algorithm_list = None
    algorithm_set = take('String "all_algorithms" or "some_algorithms"')
    if algorithm_set == "some_algorithms":
        algorithm_list = take("Algorithm list file name")
    elif algorithm_set != "all_algorithms":
        raise ConfigurationError(f'String "all_algorithms" or "some_algorithms" missing in '
                                 f'parameter file {path}')

    output_file = take("The output file name")

    return ParameterFile(results_file, output_file, instance_list, algorithm_list)


@dataclass
class RunConfig:
    """Options for one run of the table generator."""
    parameter_file: Optional[str] = None
    time_scaling: Optional[float] = None  # None means 1.0
    absolute_values: bool = False
    difficult_file: Optional[str] = None
    level: Optional[int] = None  # None means nalgorithms / 2
    champion: Optional[str] = None
    champion_file: Optional[str] = None
    metric: int = 0  # index into METRIC_NAMES
    names_file: str = "data/Alg_names.csv"
    sweep_steps: Optional[int] = None
    sweep_column: str = "FE"
    plot_dir: str = "results"
    entry_separator: str = ";"
    pair_separator: str = ":"

    @property
    def scaling(self) -> float:
        return 1.0 if self.time_scaling is None else self.time_scaling

    def validate(self) -> None:
        """Raise ConfigurationError listing every problem found."""
        problems: List[str] = []

        if self.parameter_file is None:
            problems.append("Parameter -p <parameter_file> is mandatory")

        if self.level is not None:
            if self.level < 0:
                problems.append("<level> must be >= 0")
            if self.difficult_file is None:
                problems.append("Option -l requires option -d <file_name>")

        if self.difficult_file is not None and (self.time_scaling is not None or self.absolute_values):
            problems.append("Option -d is not compatible with options -s and -a")

        if self.champion_file is not None and self.champion is None:
            problems.append("Option -r <file_name> requires option -c <algorithm>")
        if self.champion_file is None and self.champion is not None:
            problems.append("Option -c <algorithm> requires option -r <file_name>")
        if self.metric > 0 and (self.champion is None or self.champion_file is None):
            problems.append("Option -m requires options -c <algorithm> and -r <file_name>")
        if not 0 <= self.metric < len(METRIC_NAMES):
            problems.append("<metric> value must be between 0 and 3")

        if not 0.0 < self.scaling <= 1.0:
            problems.append("time scaling must be > 0 and <= 1.0")

        if self.sweep_steps is not None:
            if self.sweep_steps < 1:
                problems.append("--sweep needs at least one step")
            if self.sweep_column not in TABLE_COLUMNS[1:]:
                problems.append(f"--sweep-column must be one of {', '.join(TABLE_COLUMNS[1:])}")
            if self.difficult_file is not None or self.champion is not None or self.time_scaling is not None:
                problems.append("Option --sweep is not compatible with options -d, -c and -s")

        if self.entry_separator == self.pair_separator:
            problems.append("History entry and pair separators must differ")

        if problems:
            raise ConfigurationError(problems)
