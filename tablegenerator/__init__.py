from .numeric import DecimalValue, compare
from .data.data_loader import load_results, read_name_list, ResultsIngestor
from .data.history import parse_history, replay_history
from .evaluation.metrics import compute_statistics
from .evaluation.comparison import (
    comparison_table, extract_champions, extract_difficult
)
