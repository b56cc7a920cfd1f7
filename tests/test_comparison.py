import pandas as pd
import pytest

from tablegenerator.data.data_loader import load_results
from tablegenerator.evaluation.comparison import (
    UnknownAlgorithmError,
    comparison_table,
    extract_champions,
    extract_difficult,
    read_name_translations,
    sort_algorithms,
    write_instance_list,
    write_table,
)
from tablegenerator.evaluation.metrics import compute_statistics

NAMES = {"a1": "Alg One", "a2": "Alg Two"}


def test_table_is_sorted_and_formatted(two_by_two, tmp_path):
    stats = compute_statistics(load_results(two_by_two))
    frame = comparison_table(stats, NAMES)
    output = tmp_path / "stats.csv"
    write_table(frame, output)

    assert output.read_text().splitlines() == [
        "Heuristic,FE,FS,BA,EBA,WD,MD,BD,AR",
        "Alg Two,100.0,50.0,100.0,100.0,0.00,0.00,0.00,1.0",
        "Alg One,50.0,0.0,50.0,50.0,25.00,25.00,25.00,1.5",
    ]


def test_table_absolute_mode(two_by_two):
    stats = compute_statistics(load_results(two_by_two), absolute_values=True)
    frame = comparison_table(stats, NAMES)
    assert frame.loc[0, ["FE", "FS", "BA", "EBA"]].tolist() == ["2", "1", "2", "2"]
    assert frame.loc[1, ["FE", "FS", "BA", "EBA"]].tolist() == ["1", "0", "1", "1"]


def test_sort_ties_use_mean_deviation_then_index(write_log):
    path = write_log([
        "t,i1,a,s1,10,10,1", "t,i1,b,s1,10,10,1", "t,i1,c,s1,10,9,1", "t,i1,d,s1,10,9,1",
        "t,i2,a,s1,10,5,1", "t,i2,b,s1,10,8,1", "t,i2,c,s1,10,8,1", "t,i2,d,s1,10,8,1",
    ])
    stats = compute_statistics(load_results(path))
    assert stats.FE.tolist() == [0.5, 1.0, 0.5, 0.5]
    # a, c and d share FE; a deviates more; c and d tie entirely, higher index first
    assert sort_algorithms(stats) == [1, 3, 2, 0]


def test_missing_translation_is_fatal(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    with pytest.raises(UnknownAlgorithmError):
        comparison_table(stats, {"a1": "Alg One"})


def test_read_name_translations(tmp_path):
    path = tmp_path / "names.csv"
    path.write_text("a1,Alg One\r\na2,Alg, Two\n\n")
    assert read_name_translations(path) == {"a1": "Alg One", "a2": "Alg, Two"}

    path.write_text("a1,One\na1,Again\n")
    with pytest.raises(ValueError, match="line 2"):
        read_name_translations(path)

    path.write_text("a1 One\n")
    with pytest.raises(ValueError, match="line 1"):
        read_name_translations(path)


def test_difficult_instances_default_level(write_log):
    rows = []
    for alg in ("a1", "a2", "a3"):
        for seed in ("s1", "s2"):
            rows.append(f"t,easy,{alg},{seed},10,30,1")
            rows.append(f"t,hard,{alg},{seed},10,{40 if alg == 'a1' else 30},1")
            # a2 reaches the best only on one seed
            rows.append(f"t,split,{alg},{seed},10,{50 if alg != 'a3' and (alg, seed) != ('a2', 's2') else 20},1")
    table = load_results(write_log(rows))

    accepted, rejected = extract_difficult(table)
    assert accepted == ["hard", "split"]
    assert rejected == 1

    accepted, rejected = extract_difficult(table, level=3)
    assert accepted == ["easy", "hard", "split"]
    assert rejected == 0

    accepted, rejected = extract_difficult(table, level=0)
    assert accepted == []


def test_champions(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    assert extract_champions(stats, "a1", 0) == ["i2"]
    assert extract_champions(stats, "a2", 0) == ["i1", "i2"]
    assert extract_champions(stats, "a2", "FS") == ["i1"]
    assert extract_champions(stats, "a1", 1) == []
    assert extract_champions(stats, "a1", 3) == ["i2"]


def test_unknown_champion(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    with pytest.raises(UnknownAlgorithmError):
        extract_champions(stats, "zz", 0)


def test_write_instance_list(tmp_path):
    path = tmp_path / "out.txt"
    write_instance_list(["g1", "g2"], path)
    assert path.read_text() == "g1\ng2\n"
    assert pd.read_csv(tmp_path / "out.txt", header=None)[0].tolist() == ["g1", "g2"]
