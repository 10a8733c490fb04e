import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from billiard_BEM.geometry import (Nodes, circle_billiard_nodes,
                                   polygon_area, polygon_billiard_nodes,
                                   polygon_perimeter, square_billiard_nodes)


def test_square_reference_layout(square24):
    h = 1.0 / 6.0
    assert square24.num_nodes == 24
    assert len(square24) == 24
    assert square24.l_total == pytest.approx(4.0)
    assert square24.area == pytest.approx(1.0)
    assert_allclose(square24.w, np.full(24, h))
    assert_allclose(square24.s, (np.arange(24) + 0.5) * h)

    # one node per side quarter, counter-clockwise from the origin
    assert_allclose(square24.points[0], [0.5 * h, 0.0], atol=1e-15)
    assert_allclose(square24.normals[0], [0.0, -1.0])
    assert_allclose(square24.points[6], [1.0, 0.5 * h], atol=1e-15)
    assert_allclose(square24.normals[6], [1.0, 0.0])
    assert_allclose(square24.points[12], [1.0 - 0.5 * h, 1.0], atol=1e-15)
    assert_allclose(square24.normals[12], [0.0, 1.0])
    assert_allclose(square24.points[18], [0.0, 1.0 - 0.5 * h], atol=1e-15)
    assert_allclose(square24.normals[18], [-1.0, 0.0])


def test_square_invariants():
    nodes = square_billiard_nodes(2.5, 40)
    nodes.validate()
    assert np.all(np.diff(nodes.s) > 0)
    assert np.all((nodes.s >= 0) & (nodes.s < nodes.l_total))
    assert_allclose(np.hypot(nodes.nx, nodes.ny), 1.0)
    assert_allclose(nodes.w, 4 * 2.5 / 40)
    assert_allclose(nodes.w.sum(), nodes.l_total)
    # midpoints never sit on a corner
    on_x = np.isclose(nodes.x, 0.0) | np.isclose(nodes.x, 2.5)
    on_y = np.isclose(nodes.y, 0.0) | np.isclose(nodes.y, 2.5)
    assert not np.any(on_x & on_y)


@pytest.mark.parametrize("a, n", [(0.0, 8), (-1.0, 8), (1.0, 6), (1.0, 0),
                                  (1.0, 2)])
def test_square_rejects_invalid_arguments(a, n):
    with pytest.raises(ValueError):
        square_billiard_nodes(a, n)


def test_polygon_orientation_is_normalised():
    cw = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0]])
    nodes = polygon_billiard_nodes(cw, 8)
    ref = square_billiard_nodes(1.0, 8)
    assert_allclose(nodes.points, ref.points, atol=1e-15)
    assert_allclose(nodes.normals, ref.normals, atol=1e-15)
    assert nodes.area == pytest.approx(1.0)


def test_polygon_normals_point_outward():
    tri = np.array([[0.0, 0.0], [2.0, 0.0], [0.5, 1.5]])
    nodes = polygon_billiard_nodes(tri, 30)
    nodes.validate()
    centroid = tri.mean(axis=0)
    outward = np.einsum("ij,ij->i", nodes.normals, nodes.points - centroid)
    assert np.all(outward > 0)
    assert_allclose(nodes.w.sum(), polygon_perimeter(tri))
    assert nodes.l_total == pytest.approx(polygon_perimeter(tri))
    assert nodes.area == pytest.approx(1.5)


def test_polygon_rejects_invalid_input():
    with pytest.raises(ValueError):
        polygon_billiard_nodes(np.zeros((2, 2)), 4)
    with pytest.raises(ValueError):
        polygon_billiard_nodes([[0, 0], [1, 0], [2, 0]], 4)
    with pytest.raises(ValueError):
        polygon_billiard_nodes([[0, 0], [1, 0], [0, 1]], 0)


def test_polygon_area_and_perimeter():
    sq = np.array([[0, 0], [2, 0], [2, 2], [0, 2]])
    assert polygon_area(sq) == pytest.approx(4.0)
    assert polygon_area(sq[::-1]) == pytest.approx(-4.0)
    assert polygon_perimeter(sq) == pytest.approx(8.0)


def test_circle_nodes():
    nodes = circle_billiard_nodes(2.0, 50, center=(1.0, -1.0))
    nodes.validate()
    rel = nodes.points - np.array([1.0, -1.0])
    assert_allclose(np.hypot(rel[:, 0], rel[:, 1]), 2.0)
    assert_allclose(nodes.normals, rel / 2.0, atol=1e-15)
    assert_allclose(nodes.w.sum(), 4.0 * np.pi)
    assert nodes.area == pytest.approx(4.0 * np.pi)
    assert np.all(np.diff(nodes.s) > 0)


def test_circle_rejects_invalid_arguments():
    with pytest.raises(ValueError):
        circle_billiard_nodes(0.0, 10)
    with pytest.raises(ValueError):
        circle_billiard_nodes(1.0, 0)


def _nodes(**overrides):
    data = dict(x=[0.0, 1.0], y=[0.0, 0.0], nx=[0.0, 0.0], ny=[-1.0, -1.0],
                w=[0.5, 0.5], s=[0.0, 1.0], l_total=2.0)
    data.update(overrides)
    return Nodes(**data)


def test_validate_accepts_consistent_nodes():
    _nodes().validate()


@pytest.mark.parametrize("overrides", [
    dict(y=[0.0]),
    dict(w=[0.5, 0.5, 0.5]),
    dict(nx=[1.0, 0.0]),
    dict(w=[0.5, 0.0]),
    dict(x=[np.inf, 1.0]),
    dict(l_total=0.0),
    dict(x=[], y=[], nx=[], ny=[], w=[], s=[]),
])
def test_validate_rejects_contract_violations(overrides):
    with pytest.raises(ValueError):
        _nodes(**overrides).validate()


def test_normal_tolerance():
    _nodes(ny=[-1.0 - 1e-9, -1.0]).validate()
    with pytest.raises(ValueError):
        _nodes(ny=[-1.0 - 1e-6, -1.0]).validate()


def test_check_shape_ignores_values():
    _nodes(x=[np.nan, 1.0], nx=[2.0, 0.0]).check_shape()
    with pytest.raises(ValueError):
        _nodes(y=[0.0]).check_shape()
    with pytest.raises(ValueError):
        _nodes(x=[], y=[], nx=[], ny=[], w=[], s=[]).check_shape()


def test_nodes_are_read_only(square24):
    with pytest.raises(ValueError):
        square24.x[0] = 5.0
    with pytest.raises(ValueError):
        square24.points[0, 0] = 5.0
    with pytest.raises(AttributeError):
        square24.l_total = 3.0


def test_nodes_copy_their_input():
    x = np.array([0.0, 1.0])
    nodes = _nodes(x=x)
    x[0] = 7.0
    assert_array_equal(nodes.x, [0.0, 1.0])
