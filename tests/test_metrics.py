import unittest

import numpy as np
import pytest

from tablegenerator.data.data_loader import load_results
from tablegenerator.evaluation.metrics import (
    average_rank,
    compute_statistics,
    max_by_alg,
    max_by_alg_but_one,
    max_by_seeds,
    min_by_seeds,
)
from tablegenerator.numeric import DecimalValue


def test_two_by_two_scenario(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    assert stats.FE.tolist() == [0.5, 1.0]
    assert stats.FS.tolist() == [0.0, 0.5]
    assert stats.BA.tolist() == [0.5, 1.0]
    assert stats.EBA.tolist() == [0.5, 1.0]
    assert stats.AR.tolist() == [1.5, 1.0]
    assert stats.BD.tolist() == pytest.approx([0.25, 0.0])
    assert stats.MD.tolist() == pytest.approx([0.25, 0.0])
    assert stats.WD.tolist() == pytest.approx([0.25, 0.0])


def test_absolute_values_are_counts(two_by_two):
    stats = compute_statistics(load_results(two_by_two), absolute_values=True)
    assert stats.FE.tolist() == [1, 2]
    assert stats.FS.tolist() == [0, 1]


def test_fe_mask_holds_exactly_the_best(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    assert stats.fe_mask.tolist() == [[False, True], [True, True]]
    assert (stats.FS <= stats.FE).all()


def test_seed_ties_prefer_earlier_time(write_log):
    path = write_log([
        "t,i1,a1,s1,10,50,8.0",
        "t,i1,a1,s2,10,50.0,2.0",
        "t,i1,a1,s3,10,40,1.0",
        "t,i1,a2,s1,10,5e1,3.0",
        "t,i1,a2,s2,10,10,1.0",
        "t,i1,a2,s3,10,10,1.0",
    ])
    table = load_results(path)
    best, best_time = max_by_seeds(table)
    assert best[0, 0] == DecimalValue("50")
    assert str(best_time[0, 0]) == "2.0"
    assert str(min_by_seeds(table)[0, 1]) == "10"

    stats = compute_statistics(table)
    # both reach 50, a1 earlier (2.0 against 3.0)
    assert stats.BA.tolist() == [1.0, 1.0]
    assert stats.EBA.tolist() == [1.0, 0.0]
    assert str(stats.time_best_by_alg[0]) == "2.0"


def test_deviation_skips_non_positive_best(write_log):
    path = write_log([
        "t,i1,a1,s1,10,10,1",
        "t,i1,a2,s1,10,5,1",
        "t,i2,a1,s1,10,0,1",
        "t,i2,a2,s1,10,0,1",
    ])
    stats = compute_statistics(load_results(path))
    # i2 has best 0 and contributes nothing, the mean still divides by 2
    assert stats.BD.tolist() == pytest.approx([1 - 1.0 / 2, 1 - 0.5 / 2])


def test_mean_deviation_uses_seed_average(write_log):
    path = write_log([
        "t,i1,a1,s1,10,10,1",
        "t,i1,a1,s2,10,6,1",
        "t,i1,a2,s1,10,4,1",
        "t,i1,a2,s2,10,4,1",
    ])
    stats = compute_statistics(load_results(path))
    assert stats.MD.tolist() == pytest.approx([1 - 8 / 10, 1 - 4 / 10])
    assert stats.WD.tolist() == pytest.approx([1 - 6 / 10, 1 - 4 / 10])
    assert stats.BD.tolist() == pytest.approx([0.0, 1 - 4 / 10])


def test_rank_bounds(write_log):
    rows = []
    values = {"a1": ["3", "9", "1"], "a2": ["3", "2", "1"], "a3": ["1", "9", "7"]}
    for alg, per_instance in values.items():
        for i, value in enumerate(per_instance):
            rows.append(f"t,i{i},{alg},s1,10,{value},1")
    table = load_results(write_log(rows))
    ranks = average_rank(table)
    assert ((ranks >= 1) & (ranks <= table.n_algorithms)).all()
    # i0: a1=a2=1, a3=3; i1: a1=a3=1, a2=3; i2: a3=1, a1=a2=2
    assert ranks.tolist() == pytest.approx([4 / 3, 2.0, 5 / 3])


def test_always_tied_for_best_ranks_one(write_log):
    rows = []
    for i in range(3):
        for s in range(2):
            rows.append(f"t,i{i},best,s{s},10,{100 + i},1")
            rows.append(f"t,i{i},twin,s{s},10,{100 + i}.0,1")
            rows.append(f"t,i{i},weak,s{s},10,{i},1")
    ranks = average_rank(load_results(write_log(rows)))
    assert ranks.tolist() == [1.0, 1.0, 3.0]


def test_rank_matches_pairwise_count(write_log):
    rng = np.random.default_rng(7)
    rows = []
    for s in range(3):
        for i in range(4):
            for h in range(6):
                # few distinct values so that ties are frequent
                value = int(rng.integers(0, 4))
                spelling = f"{value}.0" if h % 2 else str(value)
                rows.append(f"t,i{i},a{h},s{s},10,{spelling},1")
    table = load_results(write_log(rows))

    expected = np.zeros(table.n_algorithms)
    for s in range(table.n_seeds):
        for i in range(table.n_instances):
            row = table.values[s, i]
            for h in range(table.n_algorithms):
                expected[h] += 1 + sum(1 for other in row if other > row[h])
    expected /= table.n_seeds * table.n_instances

    assert average_rank(table).tolist() == pytest.approx(expected.tolist())


def test_reingesting_is_idempotent(two_by_two):
    first = compute_statistics(load_results(two_by_two))
    second = compute_statistics(load_results(two_by_two))
    for name in ("FE", "FS", "BA", "EBA", "WD", "MD", "BD", "AR"):
        assert getattr(first, name).tolist() == getattr(second, name).tolist()
    assert (first.max_by_seeds == second.max_by_seeds).all()


def test_empty_table_rejected(write_log):
    table = load_results(write_log([]))
    with pytest.raises(ValueError):
        compute_statistics(table)


class TestMaxByAlg(unittest.TestCase):

    def test_float_matrix(self):
        matrix = np.array([[1.0, 3.0, 2.0], [5.0, 5.0, 0.0]])
        self.assertEqual(max_by_alg(matrix).tolist(), [3.0, 5.0])

    def test_decimal_matrix_breaks_ties_by_time(self):
        values = np.array([[DecimalValue("7"), DecimalValue("7.0"), DecimalValue("6")]], dtype=object)
        times = np.array([[DecimalValue("4"), DecimalValue("2"), DecimalValue("1")]], dtype=object)
        best, best_time = max_by_alg(values, times)
        self.assertEqual(str(best[0]), "7.0")
        self.assertEqual(str(best_time[0]), "2")

    def test_but_one(self):
        matrix = np.array([[1.0, 3.0, 2.0]])
        self.assertEqual(max_by_alg_but_one(matrix).tolist(), [[3.0, 2.0, 3.0]])

    def test_but_one_single_algorithm(self):
        out = max_by_alg_but_one(np.array([[4.0], [2.0]]))
        self.assertTrue(np.isneginf(out).all())


def test_mask_lookup(two_by_two):
    stats = compute_statistics(load_results(two_by_two))
    assert stats.mask(1) is stats.fs_mask
    assert stats.mask("eba") is stats.eba_mask
    with pytest.raises(ValueError):
        stats.mask(4)
    with pytest.raises(ValueError):
        stats.mask("AR")


if __name__ == '__main__':
    unittest.main()
