"""
Genetic algorithm for the Traveling Salesman Problem with interval crossover and permutation repair.
"""

__all__ = [
    "data",
    "evaluation",
    "evolutionary",
    "exceptions",
    "rng",
]
