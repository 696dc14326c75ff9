import numpy as np
import pytest

from tsp_genetic.evaluation import is_permutation
from tsp_genetic.exceptions import RepairInvariantError, RepairInvariantWarning
from tsp_genetic.rng import RandomSource
from tsp_genetic.solvers.operators import (
    can_crossover,
    choose_interval,
    multi_point_crossover,
    multiple_mutation,
    repair,
    single_mutation,
    swap_interval,
)


def test_interval_swap_and_repair_worked_example():
    a = np.array([0, 1, 2, 3, 4])
    b = np.array([4, 3, 2, 1, 0])

    swap_interval(a, b, start=1, interval=2)
    assert list(a) == [0, 3, 2, 3, 4]
    assert list(b) == [4, 1, 2, 1, 0]

    report_a = repair(a, 1, 2)
    report_b = repair(b, 1, 2)
    assert list(a) == [0, 3, 2, 1, 4]
    assert list(b) == [4, 1, 2, 3, 0]
    assert report_a.duplicates == report_a.missing == report_a.filled == 1
    assert report_b.ok


def test_repair_fills_in_ascending_order():
    # 5 and 4 are duplicated outside the interval; 0 and 1 went missing
    chromosome = np.array([5, 2, 4, 5, 3, 4])
    report = repair(chromosome, start=2, interval=2)
    assert report.duplicates == 2
    assert list(chromosome) == [0, 2, 4, 5, 3, 1]


def test_crossover_keeps_both_chromosomes_permutations():
    length = 12
    for seed in range(1, 60):
        rng = RandomSource(seed)
        a = np.array(rng.permutation(length))
        b = np.array(rng.permutation(length))
        outcome = multi_point_crossover(a, b, rng)
        assert is_permutation(a, length)
        assert is_permutation(b, length)
        assert outcome.violations == 0
        assert outcome.first.duplicates == outcome.first.filled
        assert outcome.second.duplicates == outcome.second.filled
        assert 2 <= outcome.interval <= length // 2
        assert 0 <= outcome.start <= length - outcome.interval


def test_crossover_keeps_swapped_interval():
    rng = RandomSource(11)
    a = np.array(rng.permutation(10))
    b = np.array(rng.permutation(10))
    original_b = b.copy()
    outcome = multi_point_crossover(a, b, rng)
    end = outcome.start + outcome.interval
    assert list(a[outcome.start:end]) == list(original_b[outcome.start:end])


def test_choose_interval_bounds():
    rng = RandomSource(3)
    for _ in range(200):
        start, interval = choose_interval(rng, 9)
        assert 2 <= interval <= 4
        assert 0 <= start <= 9 - interval


def test_can_crossover_needs_four_genes():
    assert not can_crossover(3)
    assert can_crossover(4)


def test_repair_mismatch_warns():
    # duplicates inside the interval cannot be seen from outside it
    chromosome = np.array([0, 0, 1, 2])
    with pytest.warns(RepairInvariantWarning):
        report = repair(chromosome, start=0, interval=2)
    assert not report.ok
    assert report.duplicates == 0
    assert report.missing == 1


def test_repair_mismatch_raises_when_strict():
    with pytest.raises(RepairInvariantError) as excinfo:
        repair(np.array([0, 0, 1, 2]), start=0, interval=2, strict=True)
    assert excinfo.value.missing == 1


def test_assured_single_mutation_always_changes():
    for seed in range(1, 100):
        rng = RandomSource(seed)
        chromosome = np.array(rng.permutation(6))
        before = chromosome.copy()
        single_mutation(chromosome, rng)
        assert is_permutation(chromosome, 6)
        assert (chromosome != before).sum() == 2


def test_assured_single_mutation_on_two_genes():
    chromosome = np.array([0, 1])
    single_mutation(chromosome, RandomSource(8))
    assert list(chromosome) == [1, 0]


def test_single_mutation_on_one_gene_is_noop():
    chromosome = np.array([0])
    single_mutation(chromosome, RandomSource(8))
    assert list(chromosome) == [0]


def test_multiple_mutation_preserves_permutation():
    rng = RandomSource(21)
    chromosome = np.array(rng.permutation(25))
    multiple_mutation(chromosome, rng, probability=50)
    assert is_permutation(chromosome, 25)


def test_multiple_mutation_without_probability_is_noop():
    chromosome = np.arange(10)
    multiple_mutation(chromosome, RandomSource(2), probability=0)
    assert list(chromosome) == list(range(10))
