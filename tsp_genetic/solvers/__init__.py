from .base import SolveResult, Tour, tour_length
from .gene_pool import GenePool
from .operators import (
    Crossover,
    RepairReport,
    can_crossover,
    choose_interval,
    multi_point_crossover,
    multiple_mutation,
    repair,
    single_mutation,
    swap_interval,
)

__all__ = [
    "SolveResult",
    "Tour",
    "tour_length",
    "GenePool",
    "Crossover",
    "RepairReport",
    "can_crossover",
    "choose_interval",
    "multi_point_crossover",
    "multiple_mutation",
    "repair",
    "single_mutation",
    "swap_interval",
]
