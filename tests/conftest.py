import pytest

from fakes import FlatNoise, GridTessellator, SlopeNoise


@pytest.fixture
def grid_tessellator():
    return GridTessellator()


@pytest.fixture
def flat_noise():
    return FlatNoise()


@pytest.fixture
def slope_noise():
    return SlopeNoise()
