import hashlib
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import tsplib95

from .exceptions import ConfigurationError
from .rng import RandomSource


@dataclass(frozen=True)
class City:
    x: float
    y: float

    def distance(self, other: "City") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def __str__(self) -> str:
        return f"City ({self.x:.2f}, {self.y:.2f})"


class DistanceModel:
    """
    Pairwise Euclidean distances between cities.
    The last city is the anchor every tour starts and ends at.
    """

    def __init__(self, cities: Sequence[City]):
        if len(cities) < 2:
            raise ConfigurationError("At least two cities are required", {"cities": len(cities)})
        self.cities: Tuple[City, ...] = tuple(cities)
        coords = np.array([(c.x, c.y) for c in self.cities], dtype=np.float64)
        diff = coords[:, None, :] - coords[None, :, :]
        self.matrix = np.sqrt((diff ** 2).sum(axis=-1))

    def __len__(self) -> int:
        return len(self.cities)

    @property
    def anchor(self) -> int:
        return len(self.cities) - 1

    def distance(self, a: int, b: int) -> float:
        return float(self.matrix[a, b])


@dataclass
class Instance:
    name: str
    path: Optional[Path]
    cities: List[City]
    optimum: Optional[float]


def seed_from_text(text: str) -> int:
    """
    Deterministic seed for a word: the first four bytes of its SHA-1 digest,
    read little-endian. Zero is mapped to one as seeds must be non-zero.
    """
    digest = hashlib.sha1(text.encode("utf-8")).digest()
    seed = int.from_bytes(digest[:4], "little")
    return seed or 1


def scatter_cities(
    rng: RandomSource,
    count: int,
    half_extent: float = 4.0,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> List[City]:
    cities = []
    for _ in range(count):
        x = rng.range_float(-half_extent, half_extent)
        y = rng.range_float(-half_extent, half_extent)
        cities.append(City(x + origin[0], y + origin[1]))
    return cities


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(cities: List[City], labels: List[int], path: Path) -> Optional[float]:
    index = {label: i for i, label in enumerate(labels)}
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        tour_file = tsplib95.parse(candidate.read_text())
        if not tour_file.tours:
            continue
        nodes = [index[n] for n in tour_file.tours[0]]
        dist = 0.0
        for i in range(len(nodes)):
            a = cities[nodes[i]]
            b = cities[nodes[(i + 1) % len(nodes)]]
            dist += a.distance(b)
        return float(dist)
    return None


def load_instance(path: Path) -> Instance:
    path = Path(path)
    problem = tsplib95.load(path)
    if not problem.node_coords:
        raise ConfigurationError(
            "TSPLIB instance has no node coordinates", {"path": str(path), "name": problem.name}
        )
    labels = sorted(problem.node_coords)
    cities = [City(float(problem.node_coords[n][0]), float(problem.node_coords[n][1])) for n in labels]
    optimum = _load_optimum(cities, labels, path)
    return Instance(name=problem.name or path.stem, path=path, cities=cities, optimum=optimum)
