import matplotlib
matplotlib.use("Agg")

import pytest

from billiard_BEM.geometry import square_billiard_nodes


@pytest.fixture
def square4():
    """Minimal square billiard, a=1, one node per side."""
    return square_billiard_nodes(1.0, 4)


@pytest.fixture
def square24():
    """Reference square billiard, a=1, N=24."""
    return square_billiard_nodes(1.0, 24)
