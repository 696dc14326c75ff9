import logging
import warnings
from typing import NamedTuple, Tuple

import numpy as np

from ..exceptions import RepairInvariantError, RepairInvariantWarning
from ..rng import RandomSource


logger = logging.getLogger(__name__)

SENTINEL = -1


class RepairReport(NamedTuple):
    duplicates: int
    missing: int
    filled: int

    @property
    def ok(self) -> bool:
        return self.duplicates == self.missing


class Crossover(NamedTuple):
    start: int
    interval: int
    first: RepairReport
    second: RepairReport

    @property
    def violations(self) -> int:
        return int(not self.first.ok) + int(not self.second.ok)


def can_crossover(chromosome_length: int) -> bool:
    return chromosome_length // 2 >= 2


def choose_interval(rng: RandomSource, chromosome_length: int) -> Tuple[int, int]:
    interval = rng.range_int(2, chromosome_length // 2 + 1)
    start = rng.range_int(0, chromosome_length - interval + 1)
    return start, interval


def repair(chromosome: np.ndarray, start: int, interval: int, strict: bool = False) -> RepairReport:
    """
    Restore the permutation property of ``chromosome`` after the values in
    ``[start, start + interval)`` were swapped in from another permutation.

    Values outside the interval that also occur inside it are duplicates;
    they are replaced, in ascending position order, by the numbers no longer
    present, in ascending order. Works in place.
    """
    length = chromosome.shape[0]
    end = start + interval
    inside = chromosome[start:end]

    outside = np.ones(length, dtype=bool)
    outside[start:end] = False
    duplicate_positions = np.flatnonzero(outside & np.isin(chromosome, inside))
    chromosome[duplicate_positions] = SENTINEL

    present = chromosome[chromosome != SENTINEL]
    missing = np.setdiff1d(np.arange(length), present)

    filled = min(len(duplicate_positions), len(missing))
    report = RepairReport(len(duplicate_positions), len(missing), filled)
    if not report.ok:
        if strict:
            raise RepairInvariantError(report.duplicates, report.missing)
        logger.error(
            "repair mismatch: %d duplicates, %d missing (start=%d, interval=%d)",
            report.duplicates,
            report.missing,
            start,
            interval,
        )
        warnings.warn(
            f"repair found {report.duplicates} duplicates but {report.missing} missing numbers",
            RepairInvariantWarning,
            stacklevel=2,
        )
    chromosome[duplicate_positions[:filled]] = missing[:filled]
    return report


def swap_interval(a: np.ndarray, b: np.ndarray, start: int, interval: int) -> None:
    end = start + interval
    segment = a[start:end].copy()
    a[start:end] = b[start:end]
    b[start:end] = segment


def multi_point_crossover(
    a: np.ndarray,
    b: np.ndarray,
    rng: RandomSource,
    strict: bool = False,
) -> Crossover:
    """Swap a random contiguous interval between two chromosomes in place and repair both."""
    start, interval = choose_interval(rng, a.shape[0])
    swap_interval(a, b, start, interval)
    first = repair(a, start, interval, strict=strict)
    second = repair(b, start, interval, strict=strict)
    return Crossover(start, interval, first, second)


def single_mutation(chromosome: np.ndarray, rng: RandomSource, assured: bool = True) -> None:
    length = chromosome.shape[0]
    if length < 2:
        return
    first = rng.range_int(0, length)
    second = rng.range_int(0, length)
    while assured and second == first:
        second = rng.range_int(0, length)
    chromosome[first], chromosome[second] = chromosome[second], chromosome[first]


def multiple_mutation(chromosome: np.ndarray, rng: RandomSource, probability: float) -> None:
    """Swap every gene with a random position, each with ``probability`` percent."""
    if probability <= 0:
        return
    length = chromosome.shape[0]
    for i in range(length):
        if rng.chance(probability):
            j = rng.range_int(0, length)
            chromosome[i], chromosome[j] = chromosome[j], chromosome[i]
