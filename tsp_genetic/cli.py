import argparse
import concurrent.futures
import json
import logging
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Sequence

from tsp_genetic.data import City, DistanceModel, load_instance, scatter_cities, seed_from_text
from tsp_genetic.evaluation import aggregate_results, baseline_tour_length
from tsp_genetic.evolutionary import GeneticSolver, Settings, submit_solve
from tsp_genetic.exceptions import SolveCancelled, TSPGeneticError
from tsp_genetic.rng import RandomSource
from tsp_genetic.solvers.base import SolveResult


DEFAULT_SEED_WORD = "aardvark"

SETTING_FLAGS = {
    "chromosomes": "number_of_chromosomes",
    "parents": "percentage_parents",
    "mpc": "mpc_probability",
    "multi_mutation": "multi_mutation_probability",
    "gene_swap": "multi_mutation_mutation_probability",
    "stop_at": "percentage_of_initial_to_stop_at",
    "patience": "generations_without_progress_to_stop_at",
    "max_attempts": "max_initialization_attempts",
}


def log(msg: str, stream=None) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", file=stream or sys.stdout, flush=True)


def _stream(args):
    # keep stdout parseable when emitting JSON
    return sys.stderr if getattr(args, "json", False) else sys.stdout


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] %(name)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _resolve_seed(args) -> int:
    if args.seed_number is not None:
        return args.seed_number
    return seed_from_text(args.seed)


def run_seeds(seed: int, runs: int) -> List[int]:
    """Consecutive per-run seeds starting at ``seed``; later runs step over zero."""
    seeds = []
    current = seed
    for _ in range(runs):
        seeds.append(current)
        current += 1
        if current == 0:
            current = 1
    return seeds


def build_settings(args, number_of_cities: int) -> Settings:
    values = {}
    if args.config:
        values.update(json.loads(Path(args.config).read_text()))
    for flag, name in SETTING_FLAGS.items():
        value = getattr(args, flag, None)
        if value is not None:
            values[name] = value
    if args.allow_repeat_mutation:
        values["assured_mutation"] = False
    if args.strict_repair:
        values["strict_repair"] = True
    values["number_of_cities"] = number_of_cities
    return Settings.from_dict(values)


def load_cities(args, seed: int) -> tuple:
    if args.tsp:
        instance = load_instance(Path(args.tsp))
        log(f"loaded {instance.name} ({len(instance.cities)} cities) from {args.tsp}", _stream(args))
        return instance.cities, instance.optimum
    return scatter_cities(RandomSource(seed), args.cities), None


def _run_once(settings: Settings, cities: Sequence[City], seed: int, args) -> Optional[SolveResult]:
    # The map and the solver are both driven by a source seeded with the same value.
    solver = GeneticSolver(settings, cities, RandomSource(seed))
    cancel = threading.Event()
    if args.background:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as ex:
            future = submit_solve(ex, solver, cancel)
            try:
                while True:
                    try:
                        return future.result(timeout=0.2)
                    except concurrent.futures.TimeoutError:
                        continue
            except KeyboardInterrupt:
                cancel.set()
                try:
                    return future.result()
                except SolveCancelled as exc:
                    log(f"Interrupted: {exc}", _stream(args))
                    return None
    try:
        for progress in solver.iter_solve(cancel):
            if (
                args.progress_every
                and progress.phase == "evolution"
                and progress.generation
                and progress.generation % args.progress_every == 0
            ):
                log(
                    f"gen {progress.generation}: best={progress.best_score:.4f} "
                    f"stagnant={progress.generations_without_progress}",
                    _stream(args),
                )
    except KeyboardInterrupt:
        log("Interrupted. No result.", _stream(args))
        return None
    return solver.result


def _report(result: SolveResult, baseline: Optional[float]) -> None:
    print(
        f"best={result.best_score:.4f} start={result.score_at_start:.4f} "
        f"({result.percentage_of_initial:.2f}% of initial) "
        f"generations={result.generation}/{result.total_generations} "
        f"stop={result.stop_reason} time={result.elapsed_ms:.1f}ms"
    )
    print("tour: " + " ".join(str(c) for c in result.tour))
    if result.optimum is not None:
        print(f"optimum={result.optimum:.4f} gap={100 * result.gap:.2f}%")
    if baseline is not None:
        print(f"christofides={baseline:.4f}")
    if result.repair_violations:
        print(f"warning: {result.repair_violations} repair invariant violations", file=sys.stderr)


def run(args) -> int:
    seed = _resolve_seed(args)
    cities, optimum = load_cities(args, seed)
    settings = build_settings(args, len(cities))
    log(
        f"solving {len(cities)} cities with {settings.number_of_chromosomes} chromosomes "
        f"({settings.number_of_parents} parents), seed={seed}",
        _stream(args),
    )
    results: List[SolveResult] = []
    for run_seed in run_seeds(seed, args.runs):
        result = _run_once(settings, cities, run_seed, args)
        if result is None:
            return 130
        result.optimum = optimum
        results.append(result)

    baseline = baseline_tour_length(DistanceModel(cities)) if args.baseline else None
    if args.json:
        payload = {
            "settings": settings.to_dict(),
            "results": [r.to_dict() for r in results],
            "summary": aggregate_results(results),
            "baseline": baseline,
        }
        print(json.dumps(payload, indent=2))
        return 0
    for result in results:
        _report(result, baseline)
    if len(results) > 1:
        summary = aggregate_results(results)
        print(
            f"mean best={summary['best_score']:.4f} min best={summary['min_best_score']:.4f} "
            f"mean generations={summary['generations']:.1f} mean time={summary['elapsed_ms']:.1f}ms"
        )
    return 0


def cities(args) -> int:
    seed = _resolve_seed(args)
    for i, city in enumerate(scatter_cities(RandomSource(seed), args.cities)):
        print(f"{i}\t{city.x:.4f}\t{city.y:.4f}")
    return 0


def _add_seed_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", default=DEFAULT_SEED_WORD, help="Seed word, hashed into the random seed")
    parser.add_argument("--seed-number", type=int, default=None, help="Explicit non-zero integer seed")
    parser.add_argument("--cities", type=int, default=20, help="Number of random cities to scatter")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Genetic TSP solver")
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Solve a random or TSPLIB instance")
    _add_seed_arguments(solve_parser)
    solve_parser.add_argument("--tsp", default=None, help="TSPLIB file with node coordinates")
    solve_parser.add_argument("--config", default=None, help="JSON file with solver settings")
    solve_parser.add_argument("--chromosomes", type=int, default=None)
    solve_parser.add_argument("--parents", type=float, default=None, help="Percentage of parents")
    solve_parser.add_argument("--mpc", type=float, default=None, help="Crossover probability in percent")
    solve_parser.add_argument("--multi-mutation", type=float, default=None, help="Multi-swap probability in percent")
    solve_parser.add_argument("--gene-swap", type=float, default=None, help="Per-gene swap probability in percent")
    solve_parser.add_argument("--stop-at", type=float, default=None, help="Stop at this percentage of the initial score")
    solve_parser.add_argument("--patience", type=int, default=None, help="Generations without progress to stop at")
    solve_parser.add_argument("--max-attempts", type=int, default=None, help="Cap on initialization attempts")
    solve_parser.add_argument("--allow-repeat-mutation", action="store_true")
    solve_parser.add_argument("--strict-repair", action="store_true")
    solve_parser.add_argument("--runs", type=int, default=1)
    solve_parser.add_argument("--progress-every", type=int, default=0)
    solve_parser.add_argument("--background", action="store_true", help="Solve on a worker thread")
    solve_parser.add_argument("--baseline", action="store_true", help="Also report a Christofides tour")
    solve_parser.add_argument("--json", action="store_true")
    solve_parser.set_defaults(func=run)

    cities_parser = subparsers.add_parser("cities", help="Print the cities scattered for a seed")
    _add_seed_arguments(cities_parser)
    cities_parser.set_defaults(func=cities)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except TSPGeneticError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
