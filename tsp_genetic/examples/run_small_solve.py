from tsp_genetic.data import scatter_cities, seed_from_text
from tsp_genetic.evolutionary import GeneticSolver, Settings
from tsp_genetic.rng import RandomSource


def main():
    seed = seed_from_text("aardvark")
    cities = scatter_cities(RandomSource(seed), 15)

    cfg = Settings(
        number_of_cities=len(cities),
        number_of_chromosomes=60,
        percentage_parents=20,
        generations_without_progress_to_stop_at=50,
    )
    solver = GeneticSolver(cfg, cities, RandomSource(seed))
    for progress in solver.iter_solve():
        if progress.phase == "evolution" and progress.generation % 10 == 0:
            print(f"gen {progress.generation}: best={progress.best_score:.3f}")
    result = solver.result
    print(f"best={result.best_score:.3f} ({result.percentage_of_initial:.1f}% of initial) tour={result.tour}")


if __name__ == "__main__":
    main()
