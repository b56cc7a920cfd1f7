"""
Command line front end: statistics table, difficult instances, champions
and the time-scaling sweep.
"""
import argparse
import logging
import sys
from pathlib import Path

from tablegenerator.config import ConfigurationError, RunConfig, read_parameters
from tablegenerator.data.data_loader import CoverageError, ResultsFormatError, load_results
from tablegenerator.evaluation.comparison import (
    UnknownAlgorithmError,
    comparison_table,
    extract_champions,
    extract_difficult,
    read_name_translations,
    write_instance_list,
    write_table,
)
from tablegenerator.evaluation.metrics import compute_statistics

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare heuristics from a results log and write a table of statistics")
    parser.add_argument('-p', dest='parameter_file', metavar='PARAMETER_FILE',
                        help='Parameter file (mandatory)')
    parser.add_argument('-s', dest='time_scaling', type=float, metavar='SCALING',
                        help='Scale all time limits by this factor (>0 and <= 1.0) [default: 1.0]')
    parser.add_argument('-a', dest='absolute_values', action='store_true',
                        help='Report absolute counts rather than percentages')
    parser.add_argument('-d', dest='difficult_file', metavar='FILE',
                        help='Write the instances whose best value is found by at most '
                             '<level> algorithms for all seeds to this file')
    parser.add_argument('-l', dest='level', type=int, metavar='LEVEL',
                        help='Difficulty level (>= 0) [default: number of algorithms / 2]')
    parser.add_argument('-c', dest='champion', metavar='ALGORITHM',
                        help='Algorithm whose winning instances are written with -r')
    parser.add_argument('-r', dest='champion_file', metavar='FILE',
                        help='Write the instances where <algorithm> is best in <metric> ranking')
    parser.add_argument('-m', dest='metric', type=int, default=0, metavar='METRIC',
                        help='0:FE, 1:FS, 2:BA, 3:EBA [default: 0]')
    parser.add_argument('-n', dest='names_file', default='data/Alg_names.csv', metavar='FILE',
                        help='Algorithm name translations [default: data/Alg_names.csv]')
    parser.add_argument('--sweep', dest='sweep_steps', type=int, metavar='STEPS',
                        help='Recompute the table for time scalings 1/STEPS .. 1')
    parser.add_argument('--sweep-column', default='FE',
                        help='Table column collected by --sweep [default: FE]')
    parser.add_argument('--plot-dir', default='results',
                        help='Directory for the sweep .dat files and plot [default: results]')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')
    return parser


def run(config: RunConfig) -> None:
    """Execute one configured run. Errors propagate to the caller."""
    config.validate()
    parameters = read_parameters(config.parameter_file)
    ingest_options = dict(entry_separator=config.entry_separator,
                          pair_separator=config.pair_separator)

    if config.sweep_steps is not None:
        # imported here so the plain table path does not load matplotlib
        import matplotlib.pyplot as plt

        from tablegenerator.evaluation.sweep import scaling_sweep, write_plot_data
        from tablegenerator.visualization.plot import plot_sweep

        translations = read_name_translations(config.names_file)
        frame = scaling_sweep(parameters, config.sweep_steps, translations,
                              metric=config.sweep_column,
                              absolute_values=config.absolute_values,
                              **ingest_options)
        write_plot_data(frame, config.sweep_column, config.plot_dir)
        output = Path(config.plot_dir) / f"sweep_{config.sweep_column}.png"
        fig = plot_sweep(frame, config.sweep_column, output=output)
        plt.close(fig)
        print(f"Saved: {output}")
        return

    instance_list = parameters.instance_list
    if config.difficult_file is not None and instance_list is not None:
        logger.info("Difficult instance extraction ignores the instance list")
        instance_list = None

    table = load_results(parameters.results_file, instance_list, parameters.algorithm_list,
                         time_scaling=config.scaling, **ingest_options)
    summary = table.summary
    print(f"Read {summary.rows_read} records.")
    print(f"{summary.skipped_instances} were skipped because of uninteresting instances")
    print(f"{summary.skipped_algorithms} were skipped because of uninteresting algorithms")

    if config.difficult_file is not None:
        accepted, rejected = extract_difficult(table, config.level)
        write_instance_list(accepted, config.difficult_file)
        print(f"Rejected: {rejected}")
        print(f"Accepted: {len(accepted)}")
        return

    stats = compute_statistics(table, absolute_values=config.absolute_values)
    if config.champion_file is not None:
        accepted = extract_champions(stats, config.champion, config.metric)
        write_instance_list(accepted, config.champion_file)
        print(f"Rejected: {table.n_instances - len(accepted)}")
        print(f"Accepted: {len(accepted)}")
    else:
        translations = read_name_translations(config.names_file)
        write_table(comparison_table(stats, translations), parameters.output_file)
        print(f"Saved: {parameters.output_file}")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='[%(levelname)s] %(message)s')

    config = RunConfig(
        parameter_file=args.parameter_file,
        time_scaling=args.time_scaling,
        absolute_values=args.absolute_values,
        difficult_file=args.difficult_file,
        level=args.level,
        champion=args.champion,
        champion_file=args.champion_file,
        metric=args.metric,
        names_file=args.names_file,
        sweep_steps=args.sweep_steps,
        sweep_column=args.sweep_column,
        plot_dir=args.plot_dir,
    )

    try:
        run(config)
    except ConfigurationError as e:
        for problem in e.problems:
            print(f"Error: {problem}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"Error: File '{e.filename or e}' not found", file=sys.stderr)
        return 1
    except CoverageError as e:
        print(f"Error: {e}. Execution is aborted.", file=sys.stderr)
        for name in e.missing_instances + e.missing_algorithms:
            print(name, file=sys.stderr)
        return 1
    except (ResultsFormatError, UnknownAlgorithmError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
