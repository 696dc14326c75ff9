from typing import Sequence

import numpy as np


class GenePool:
    """
    Fixed-size population stored as one (chromosomes x length) integer array.
    Chromosomes are addressed by slot index; the first ``number_of_parents``
    slots hold the parents at the start of every generation.
    """

    def __init__(self, number_of_chromosomes: int, chromosome_length: int):
        self.number_of_chromosomes = number_of_chromosomes
        self.chromosome_length = chromosome_length
        self.genes = np.zeros((number_of_chromosomes, chromosome_length), dtype=np.int64)
        self.scores = np.zeros(number_of_chromosomes, dtype=np.float64)

    def __len__(self) -> int:
        return self.number_of_chromosomes

    def __getitem__(self, slot: int) -> np.ndarray:
        # Row view; writes go straight into the pool.
        return self.genes[slot]

    def set(self, slot: int, chromosome: Sequence[int]) -> None:
        self.genes[slot, :] = chromosome

    def swap(self, a: int, b: int) -> None:
        if a == b:
            return
        self.genes[[a, b]] = self.genes[[b, a]]
        self.scores[[a, b]] = self.scores[[b, a]]

    def copy_slot(self, source: int, target: int) -> None:
        self.genes[target, :] = self.genes[source]
        self.scores[target] = self.scores[source]

    def promote(self, ranked_slots: Sequence[int], count: int) -> int:
        """
        Move the chromosomes in ``ranked_slots`` (best first) into slots
        ``0..count`` using slot swaps. Returns how many were promoted.
        """
        count = min(count, len(ranked_slots))
        # position[s] is where the chromosome originally in slot s lives now
        position = list(range(self.number_of_chromosomes))
        occupant = list(range(self.number_of_chromosomes))
        for i in range(count):
            current = position[ranked_slots[i]]
            if current != i:
                self.swap(i, current)
                moved = occupant[i]
                occupant[i], occupant[current] = ranked_slots[i], moved
                position[ranked_slots[i]], position[moved] = i, current
        return count
