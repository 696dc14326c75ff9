import math

import numpy as np
import pytest

from tsp_genetic.data import City, DistanceModel, load_instance, scatter_cities, seed_from_text
from tsp_genetic.exceptions import ConfigurationError
from tsp_genetic.rng import RandomSource


SQUARE_TSP = """NAME: square5
TYPE: TSP
DIMENSION: 5
EDGE_WEIGHT_TYPE: EUC_2D
NODE_COORD_SECTION
1 0 0
2 10 0
3 10 10
4 0 10
5 5 5
EOF
"""

SQUARE_TOUR = """NAME: square5.opt.tour
TYPE: TOUR
DIMENSION: 5
TOUR_SECTION
1
2
3
4
5
-1
EOF
"""


def test_city_distance_is_euclidean():
    assert City(0, 0).distance(City(3, 4)) == pytest.approx(5.0)
    assert City(1, 1).distance(City(1, 1)) == 0.0


def test_distance_model_matrix_is_symmetric(random_cities):
    model = DistanceModel(random_cities)
    assert model.matrix.shape == (10, 10)
    assert np.allclose(model.matrix, model.matrix.T)
    assert (model.matrix >= 0).all()
    assert np.allclose(np.diag(model.matrix), 0.0)
    assert model.distance(2, 5) == pytest.approx(random_cities[2].distance(random_cities[5]))


def test_anchor_is_last_city(square_cities):
    model = DistanceModel(square_cities)
    assert model.anchor == 4
    assert len(model) == 5


def test_distance_model_needs_two_cities():
    with pytest.raises(ConfigurationError):
        DistanceModel([City(0, 0)])


def test_seed_from_text_is_deterministic():
    assert seed_from_text("aardvark") == seed_from_text("aardvark")
    assert seed_from_text("aardvark") != seed_from_text("zebra")
    seed = seed_from_text("aardvark")
    assert 0 < seed < 2 ** 32


def test_scatter_cities_within_extent():
    cities = scatter_cities(RandomSource(99), 50, half_extent=4.0, origin=(10.0, -2.0))
    assert len(cities) == 50
    for city in cities:
        assert 6.0 <= city.x < 14.0
        assert -6.0 <= city.y < 2.0


def test_scatter_cities_is_reproducible():
    assert scatter_cities(RandomSource(7), 12) == scatter_cities(RandomSource(7), 12)
    assert scatter_cities(RandomSource(7), 12) != scatter_cities(RandomSource(8), 12)


def test_load_instance_reads_coordinates_and_optimum(tmp_path):
    path = tmp_path / "square5.tsp"
    path.write_text(SQUARE_TSP)
    (tmp_path / "square5.opt.tour").write_text(SQUARE_TOUR)

    instance = load_instance(path)

    assert instance.name == "square5"
    assert len(instance.cities) == 5
    assert instance.cities[2] == City(10.0, 10.0)
    assert instance.cities[-1] == City(5.0, 5.0)
    assert instance.optimum == pytest.approx(30.0 + 2 * math.hypot(5, 5))


def test_load_instance_without_tour_has_no_optimum(tmp_path):
    path = tmp_path / "square5.tsp"
    path.write_text(SQUARE_TSP)
    assert load_instance(path).optimum is None


def test_load_instance_without_coordinates_fails(tmp_path):
    path = tmp_path / "explicit.tsp"
    path.write_text(
        "NAME: explicit\nTYPE: TSP\nDIMENSION: 3\nEDGE_WEIGHT_TYPE: EXPLICIT\n"
        "EDGE_WEIGHT_FORMAT: FULL_MATRIX\nEDGE_WEIGHT_SECTION\n0 1 2\n1 0 3\n2 3 0\nEOF\n"
    )
    with pytest.raises(ConfigurationError):
        load_instance(path)
