import math
from typing import Dict, List, Sequence

import networkx as nx
from networkx.algorithms import approximation as approx
import numpy as np

from .data import DistanceModel
from .solvers.base import SolveResult, tour_length


SCORE_REL_TOL = 1e-6
SCORE_ABS_TOL = 1e-9


def goal_function(model: DistanceModel, chromosome: Sequence[int]) -> float:
    """
    Length of the closed tour that starts at the anchor city, visits the
    cities of ``chromosome`` in order and returns to the anchor.
    The chromosome is assumed to be a valid permutation.
    """
    chromosome = np.asarray(chromosome)
    anchor = model.anchor
    dist = model.matrix
    total = dist[anchor, chromosome[0]] + dist[chromosome[-1], anchor]
    total += dist[chromosome[:-1], chromosome[1:]].sum()
    return float(total)


def scores_identical(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=SCORE_REL_TOL, abs_tol=SCORE_ABS_TOL)


def is_permutation(chromosome: Sequence[int], length: int) -> bool:
    values = np.asarray(chromosome)
    if values.shape != (length,):
        return False
    return bool(np.array_equal(np.sort(values), np.arange(length)))


def to_graph(model: DistanceModel) -> nx.Graph:
    graph = nx.complete_graph(len(model))
    for a, b in graph.edges():
        graph[a][b]["weight"] = model.distance(a, b)
    return graph


def baseline_tour_length(model: DistanceModel) -> float:
    """Christofides tour length, a reference point for reports."""
    if len(model) < 3:
        return tour_length(model, list(range(len(model))))
    graph = to_graph(model)
    cycle = approx.traveling_salesman_problem(
        graph, weight="weight", cycle=True, method=approx.christofides
    )
    # the returned cycle repeats its first node at the end
    return tour_length(model, cycle[:-1])


def aggregate_results(results: List[SolveResult]) -> Dict[str, float]:
    if not results:
        return {
            "best_score": float("inf"),
            "percentage_of_initial": float("inf"),
            "generations": 0.0,
            "elapsed_ms": 0.0,
        }
    n = len(results)
    return {
        "best_score": sum(r.best_score for r in results) / n,
        "min_best_score": min(r.best_score for r in results),
        "percentage_of_initial": sum(r.percentage_of_initial for r in results) / n,
        "generations": sum(r.total_generations for r in results) / n,
        "elapsed_ms": sum(r.elapsed_ms for r in results) / n,
    }
