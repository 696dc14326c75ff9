import pytest

from tsp_genetic.data import City, scatter_cities
from tsp_genetic.rng import RandomSource


@pytest.fixture
def square_cities():
    """Four square corners with the anchor in the centre."""
    return [City(0, 0), City(1, 0), City(1, 1), City(0, 1), City(0.5, 0.5)]


@pytest.fixture
def irregular_cities():
    return [City(0, 0), City(3, 0), City(4.2, 2.1), City(1.3, 5.7), City(2.2, 1.9)]


@pytest.fixture
def random_cities():
    return scatter_cities(RandomSource(4242), 10)


@pytest.fixture
def rng():
    return RandomSource(1234)
