import logging
import time
from concurrent.futures import Executor, Future
from dataclasses import asdict, dataclass, fields
from typing import Iterator, List, Optional, Sequence

import numpy as np

from .data import City, DistanceModel
from .evaluation import goal_function, scores_identical
from .exceptions import ConfigurationError, InitializationError, SolveCancelled
from .rng import RandomSource
from .solvers.base import SolveResult
from .solvers.gene_pool import GenePool
from .solvers.operators import can_crossover, multi_point_crossover, multiple_mutation, single_mutation


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    number_of_cities: int = 20
    number_of_chromosomes: int = 200
    percentage_parents: float = 20.0
    mpc_probability: float = 75.0
    multi_mutation_probability: float = 25.0
    multi_mutation_mutation_probability: float = 10.0
    percentage_of_initial_to_stop_at: float = 0.0
    generations_without_progress_to_stop_at: int = 100
    assured_mutation: bool = True
    max_initialization_attempts: Optional[int] = None
    strict_repair: bool = False

    def __post_init__(self):
        if self.number_of_cities < 2:
            raise ConfigurationError("number_of_cities must be at least 2", {"value": self.number_of_cities})
        if self.number_of_chromosomes < 1:
            raise ConfigurationError(
                "number_of_chromosomes must be at least 1", {"value": self.number_of_chromosomes}
            )
        for name in (
            "percentage_parents",
            "mpc_probability",
            "multi_mutation_probability",
            "multi_mutation_mutation_probability",
            "percentage_of_initial_to_stop_at",
        ):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be within [0, 100]", {"value": value})
        if self.number_of_parents < 1:
            raise ConfigurationError(
                "percentage_parents leaves no parents",
                {"number_of_chromosomes": self.number_of_chromosomes, "percentage_parents": self.percentage_parents},
            )
        if self.generations_without_progress_to_stop_at < 1:
            raise ConfigurationError(
                "generations_without_progress_to_stop_at must be at least 1",
                {"value": self.generations_without_progress_to_stop_at},
            )
        if self.max_initialization_attempts is not None and self.max_initialization_attempts < 1:
            raise ConfigurationError(
                "max_initialization_attempts must be at least 1", {"value": self.max_initialization_attempts}
            )

    @property
    def chromosome_length(self) -> int:
        return self.number_of_cities - 1

    @property
    def number_of_parents(self) -> int:
        return int(round(self.number_of_chromosomes * self.percentage_parents / 100))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError("Unknown settings", {"keys": unknown})
        return cls(**data)


@dataclass
class Progress:
    phase: str
    generation: int
    best_score: float
    best_score_at_start: float
    generations_without_progress: int
    attempts: int


class GeneticSolver:
    def __init__(self, settings: Settings, cities: Sequence[City], rng: RandomSource):
        if len(cities) != settings.number_of_cities:
            raise ConfigurationError(
                "Number of cities does not match settings",
                {"cities": len(cities), "number_of_cities": settings.number_of_cities},
            )
        self.cfg = settings
        self.model = DistanceModel(cities)
        self.rng = rng
        self.pool = GenePool(settings.number_of_chromosomes, settings.chromosome_length)
        self.best_score_at_start = float("inf")
        self.best_score_this_generation = float("inf")
        self.best_chromosome: Optional[np.ndarray] = None
        self.generation = 0
        self.generations_without_progress = 0
        self.attempts = 0
        self.repair_violations = 0
        self.history: List[float] = []
        self.result: Optional[SolveResult] = None

    @property
    def number_of_parents(self) -> int:
        return self.cfg.number_of_parents

    def evaluate(self, slot: int) -> float:
        score = goal_function(self.model, self.pool[slot])
        self.pool.scores[slot] = score
        return score

    def initialize_population(self) -> float:
        best = float("inf")
        for slot in range(self.cfg.number_of_chromosomes):
            self.pool.set(slot, self.rng.permutation(self.cfg.chromosome_length))
            best = min(best, self.evaluate(slot))
        self.best_score_at_start = best
        return best

    def select_parents(self) -> None:
        order = np.argsort(self.pool.scores, kind="stable")
        self.pool.promote(order, self.number_of_parents)

    def has_duplicate_parents(self) -> bool:
        scores = self.pool.scores
        for i in range(self.number_of_parents):
            for j in range(i + 1, self.number_of_parents):
                if scores_identical(scores[i], scores[j]):
                    return True
        return False

    def reproduce(self) -> None:
        parents = self.number_of_parents
        for slot in range(parents, self.cfg.number_of_chromosomes):
            self.pool.copy_slot((slot - parents) % parents, slot)

    def vary(self) -> None:
        cfg = self.cfg
        crossover_allowed = can_crossover(cfg.chromosome_length)
        i = self.number_of_parents
        while i < cfg.number_of_chromosomes:
            if (
                crossover_allowed
                and cfg.number_of_chromosomes - i >= 2
                and self.rng.chance(cfg.mpc_probability)
            ):
                self._crossover(i, i + 1)
                i += 2
                continue
            if self.rng.chance(cfg.multi_mutation_probability):
                multiple_mutation(self.pool[i], self.rng, cfg.multi_mutation_mutation_probability)
            else:
                single_mutation(self.pool[i], self.rng, assured=cfg.assured_mutation)
            i += 1

    def _crossover(self, a: int, b: int) -> None:
        outcome = multi_point_crossover(self.pool[a], self.pool[b], self.rng, strict=self.cfg.strict_repair)
        self.repair_violations += outcome.violations

    def select_survivors(self) -> int:
        cfg = self.cfg
        parents = self.number_of_parents
        best_slot = 0
        for slot in range(cfg.number_of_chromosomes):
            if self.evaluate(slot) < self.pool.scores[best_slot]:
                best_slot = slot
        self.best_score_this_generation = float(self.pool.scores[best_slot])
        self.best_chromosome = self.pool[best_slot].copy()

        scores = self.pool.scores
        marked = np.zeros(cfg.number_of_chromosomes, dtype=bool)
        for child in range(parents, cfg.number_of_chromosomes):
            if any(scores_identical(scores[child], scores[p]) for p in range(parents)):
                marked[child] = True
                continue
            for earlier in range(parents, child):
                if not marked[earlier] and scores_identical(scores[child], scores[earlier]):
                    marked[child] = True
                    break

        candidates = np.flatnonzero(~marked)
        ranked = candidates[np.argsort(scores[candidates], kind="stable")]
        promoted = self.pool.promote(ranked, parents)
        if promoted < parents:
            logger.warning("only %d of %d parents could be promoted", promoted, parents)
        return promoted

    def _progress(self, phase: str) -> Progress:
        return Progress(
            phase=phase,
            generation=self.generation,
            best_score=self.best_score_this_generation,
            best_score_at_start=self.best_score_at_start,
            generations_without_progress=self.generations_without_progress,
            attempts=self.attempts,
        )

    def _percentage_of_initial(self) -> float:
        if self.best_score_at_start == 0:
            return 100.0
        return 100.0 * self.best_score_this_generation / self.best_score_at_start

    def iter_solve(self, cancel=None) -> Iterator[Progress]:
        """
        Run the solve as a generator that suspends at the top of every loop
        iteration. ``cancel`` is checked after each suspension; once it is set
        the solve raises ``SolveCancelled``. The final result is stored in
        ``self.result``.
        """
        cfg = self.cfg
        start_time = time.perf_counter()
        self.generation = 0
        self.generations_without_progress = 0
        self.attempts = 0
        self.repair_violations = 0
        self.history = []
        self.result = None

        while True:
            yield self._progress("initialization")
            if cancel is not None and cancel.is_set():
                raise SolveCancelled("initialization")
            if cfg.max_initialization_attempts is not None and self.attempts >= cfg.max_initialization_attempts:
                raise InitializationError(self.attempts)
            self.attempts += 1
            logger.debug("initialization attempt %d", self.attempts)
            self.initialize_population()
            self.select_parents()
            if not self.has_duplicate_parents():
                break
            logger.warning("duplicate parent scores on attempt %d, reinitializing", self.attempts)

        self.best_score_this_generation = self.best_score_at_start
        self.best_chromosome = self.pool[0].copy()
        self.history.append(self.best_score_this_generation)
        logger.info(
            "population ready after %d attempt(s): best score at start %.4f",
            self.attempts,
            self.best_score_at_start,
        )

        stop_reason = "threshold"
        while self._percentage_of_initial() >= cfg.percentage_of_initial_to_stop_at:
            yield self._progress("evolution")
            if cancel is not None and cancel.is_set():
                raise SolveCancelled("evolution", self.generation)
            previous_best = self.best_score_this_generation
            self.generation += 1
            self.reproduce()
            self.vary()
            self.select_survivors()
            self.history.append(self.best_score_this_generation)

            if self.best_score_this_generation < previous_best:
                self.generations_without_progress = 0
            else:
                self.generations_without_progress += 1
            logger.debug(
                "generation %d: best %.4f (%d without progress)",
                self.generation,
                self.best_score_this_generation,
                self.generations_without_progress,
            )
            if self.generations_without_progress >= cfg.generations_without_progress_to_stop_at:
                stop_reason = "stagnation"
                break

        elapsed_ms = (time.perf_counter() - start_time) * 1000.0
        self.result = SolveResult(
            best_chromosome=[int(g) for g in self.best_chromosome],
            anchor=self.model.anchor,
            score_at_start=self.best_score_at_start,
            best_score=self.best_score_this_generation,
            generation=self.generation - self.generations_without_progress,
            total_generations=self.generation,
            elapsed_ms=elapsed_ms,
            initialization_attempts=self.attempts,
            repair_violations=self.repair_violations,
            stop_reason=stop_reason,
            seed=self.rng.seed,
            history=list(self.history),
        )
        logger.info(
            "solve finished (%s) after %d generations: best %.4f (%.2f%% of start) in %.1f ms",
            stop_reason,
            self.generation,
            self.result.best_score,
            self.result.percentage_of_initial,
            elapsed_ms,
        )

    def solve(self, cancel=None) -> SolveResult:
        for _ in self.iter_solve(cancel):
            pass
        return self.result


def solve(
    settings: Settings,
    cities: Sequence[City],
    seed: Optional[int] = None,
    cancel=None,
) -> SolveResult:
    return GeneticSolver(settings, cities, RandomSource(seed)).solve(cancel)


def submit_solve(executor: Executor, solver: GeneticSolver, cancel=None) -> Future:
    """Run ``solver.solve`` on ``executor``; cancellation surfaces through the future."""
    return executor.submit(solver.solve, cancel)
