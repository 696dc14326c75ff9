import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..data import DistanceModel


Tour = List[int]


def tour_length(model: DistanceModel, tour: Sequence[int]) -> float:
    """Length of the closed tour visiting ``tour`` in order and returning to its first city."""
    dist = 0.0
    n = len(tour)
    for i in range(n):
        a = tour[i]
        b = tour[(i + 1) % n]
        dist += model.distance(a, b)
    return float(dist)


@dataclass
class SolveResult:
    best_chromosome: Tour
    anchor: int
    score_at_start: float
    best_score: float
    generation: int
    total_generations: int
    elapsed_ms: float
    initialization_attempts: int = 1
    repair_violations: int = 0
    stop_reason: str = "threshold"
    optimum: Optional[float] = None
    seed: Optional[int] = None
    history: List[float] = field(default_factory=list)

    @property
    def percentage_of_initial(self) -> float:
        if math.isclose(self.score_at_start, 0.0):
            return 100.0
        return 100.0 * self.best_score / self.score_at_start

    @property
    def tour(self) -> Tour:
        return [self.anchor] + list(self.best_chromosome) + [self.anchor]

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.best_score - self.optimum) / self.optimum

    def to_dict(self) -> dict:
        return {
            "best_chromosome": list(self.best_chromosome),
            "tour": self.tour,
            "score_at_start": self.score_at_start,
            "best_score": self.best_score,
            "percentage_of_initial": self.percentage_of_initial,
            "generation": self.generation,
            "total_generations": self.total_generations,
            "elapsed_ms": self.elapsed_ms,
            "initialization_attempts": self.initialization_attempts,
            "repair_violations": self.repair_violations,
            "stop_reason": self.stop_reason,
            "optimum": self.optimum,
            "seed": self.seed,
        }
