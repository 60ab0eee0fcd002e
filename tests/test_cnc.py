"""
Tests for the CNC curvature estimator.

Validates:
    - sphere and plane recovery for every generation method
    - zero-area neighborhoods and degenerate inputs
    - orientation compensation of inverted triangles
    - determinism and neighbor-order invariance of the hexagram methods
    - the accessors exposed to callers
"""

import logging

import numpy as np
import pytest

from cnccurvature import (
    CNC,
    FitResult,
    FitState,
    MissingEvalPointError,
    OrientedPoint,
    OutOfRangeError,
    PointCloud,
    TriangleGenerationMethod,
)

from conftest import fibonacci_sphere, radius_neighbors

ALL_METHODS = list(TriangleGenerationMethod)
HEXAGRAM_METHODS = [TriangleGenerationMethod.HEXAGRAM, TriangleGenerationMethod.AVG_HEXAGRAM]
EVAL_INDICES = [100, 777, 1500]


def fit_at(cloud, index, method, radius=0.5, **kwargs) -> CNC:
    fit = CNC(method=method, **kwargs)
    fit.set_eval_point(cloud[index])
    result = fit.compute_with_ids(radius_neighbors(cloud, index, radius), cloud)
    assert result == FitResult.STABLE
    return fit


# ── Sphere recovery ─────────────────────────────────────────────────

@pytest.mark.parametrize("method", ALL_METHODS)
@pytest.mark.parametrize("index", EVAL_INDICES)
class TestSphere:

    def test_mean_and_gaussian_curvature(self, sphere, sphere_radius, method, index):
        fit = fit_at(sphere, index, method, seed=index)
        assert fit.kmean() == pytest.approx(1.0 / sphere_radius, rel=1e-6)
        assert fit.kgauss() == pytest.approx(1.0 / sphere_radius**2, rel=1e-6)

    def test_principal_curvatures(self, sphere, sphere_radius, method, index):
        fit = fit_at(sphere, index, method, seed=index)
        assert fit.kmin() <= fit.kmax()
        assert fit.kmin() == pytest.approx(1.0 / sphere_radius, rel=0.15)
        assert fit.kmax() == pytest.approx(1.0 / sphere_radius, rel=0.15)

    def test_principal_directions(self, sphere, method, index):
        fit = fit_at(sphere, index, method, seed=index)
        v1, v2 = fit.kmin_direction(), fit.kmax_direction()
        n = sphere[index].normal
        assert np.linalg.norm(v1) == pytest.approx(1.0)
        assert np.linalg.norm(v2) == pytest.approx(1.0)
        assert abs(v1 @ v2) < 1e-9
        assert abs(v1 @ n) < 1e-3
        assert abs(v2 @ n) < 1e-3


def test_sphere_end_to_end():
    # 729 points on a sphere of radius 5, every other point is a neighbor
    cloud = fibonacci_sphere(729, radius=5.0)
    index = 364
    ids = [i for i in range(len(cloud)) if i != index]

    fit = CNC(method=TriangleGenerationMethod.AVG_HEXAGRAM)
    fit.set_eval_point(cloud[index])
    assert fit.compute_with_ids(ids, cloud) == FitResult.STABLE

    assert fit.get_num_triangles() == 2
    assert fit.kmean() == pytest.approx(0.2, rel=0.05)
    assert fit.kgauss() == pytest.approx(0.04, rel=0.10)


# ── Plane recovery ──────────────────────────────────────────────────

@pytest.mark.parametrize("method", ALL_METHODS)
def test_plane_has_no_curvature(plane, method):
    index = 210
    fit = fit_at(plane, index, method, radius=0.35, seed=1)
    assert fit.area > 0.0
    assert fit.kmean() == pytest.approx(0.0, abs=1e-12)
    assert fit.kgauss() == pytest.approx(0.0, abs=1e-12)
    assert fit.kmin() == pytest.approx(0.0, abs=1e-12)
    assert fit.kmax() == pytest.approx(0.0, abs=1e-12)


# ── Degenerate inputs ───────────────────────────────────────────────

class TestDegenerate:

    @pytest.mark.parametrize("positions", [
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]],
        [[1.0, 1.0, 1.0], [1.0, 1.0, 1.0], [1.0, 1.0, 1.0]],
    ])
    def test_zero_area(self, positions):
        cloud = PointCloud(positions, np.tile([0.0, 0.0, 1.0], (3, 1)))
        fit = CNC(method="uniform", seed=0)
        assert fit.compute(cloud) == FitResult.STABLE
        assert fit.get_num_triangles() > 0
        assert fit.area == 0.0
        values = [fit.kmean(), fit.kgauss(), fit.kmin(), fit.kmax()]
        assert np.all(np.isfinite(values))
        assert values == pytest.approx([0.0, 0.0, 0.0, 0.0], abs=1e-12)

    def test_too_few_neighbors(self, sphere, caplog):
        fit = CNC(method="independent")
        with caplog.at_level(logging.WARNING, logger="cnccurvature"):
            result = fit.compute_with_ids([0, 1], sphere)
        assert result == FitResult.UNDEFINED
        assert fit.result == FitResult.UNDEFINED
        assert fit.state == FitState.INITIALIZED
        assert fit.get_num_triangles() == 0
        assert "Degenerate neighborhood" in caplog.text

    def test_empty_hexagram_neighborhood(self, sphere):
        fit = CNC(method="hexagram")
        fit.set_eval_point(sphere[0])
        assert fit.compute_with_ids([], sphere) == FitResult.UNDEFINED

    def test_hexagram_without_eval_point(self, sphere):
        with pytest.raises(MissingEvalPointError):
            CNC(method="avg_hexagram").compute(sphere)

    def test_ids_outside_the_cloud(self, sphere):
        with pytest.raises(OutOfRangeError):
            CNC(method="uniform").compute_with_ids([0, 1, len(sphere)], sphere)

    def test_negative_epsilon(self):
        with pytest.raises(ValueError):
            CNC(epsilon=-1.0)


# ── Orientation compensation ────────────────────────────────────────

def test_inverted_triangles_contribute_with_physical_sign():
    # Three points of a sphere: every estimation draws a single triangle whose
    # winding depends on the shuffle.
    radius = 4.0
    directions = np.array([[0.05, 0.02, 1.0], [-0.03, 0.06, 1.0], [-0.02, -0.05, 1.0]])
    normals = directions / np.linalg.norm(directions, axis=1)[:, None]
    cloud = PointCloud(radius * normals, normals)

    signs = set()
    kmeans = []
    for seed in range(20):
        fit = CNC(method="independent", seed=seed)
        assert fit.compute(cloud) == FitResult.STABLE
        (triangle,) = fit.triangles
        signs.add(np.sign(triangle.mu0()))
        kmeans.append(fit.kmean())
        assert fit.area > 0.0
        assert fit.kgauss() == pytest.approx(1.0 / radius**2, rel=1e-9)

    assert signs == {-1.0, 1.0}
    np.testing.assert_allclose(kmeans, 1.0 / radius, rtol=1e-9)


def test_epsilon_skips_small_triangles(sphere):
    fit = CNC(method="uniform", seed=0, epsilon=1e6)
    fit.compute_with_ids(radius_neighbors(sphere, 0, 0.5), sphere)
    assert fit.area == 0.0
    assert fit.kmean() == 0.0


# ── Determinism ─────────────────────────────────────────────────────

@pytest.mark.parametrize("method", HEXAGRAM_METHODS)
class TestDeterminism:

    def test_repeated_runs_are_equal(self, sphere, method):
        first = fit_at(sphere, 100, method)
        second = fit_at(sphere, 100, method)
        assert first == second
        assert not (first != second)
        assert first.kmean() == second.kmean()
        assert first.get_triangles() == second.get_triangles()

    def test_neighbor_order_invariance(self, sphere, method):
        ids = radius_neighbors(sphere, 100, 0.5)
        shuffled = np.random.default_rng(11).permutation(ids).tolist()

        first = CNC(method=method)
        first.set_eval_point(sphere[100])
        first.compute_with_ids(ids, sphere)

        second = CNC(method=method)
        second.set_eval_point(sphere[100])
        second.compute_with_ids(shuffled, sphere)

        assert first.is_approx(second, 1e-9)
        assert second.is_approx(first, 1e-9)

    def test_compute_matches_compute_with_all_ids(self, sphere, method):
        first = CNC(method=method)
        first.set_eval_point(sphere[100])
        first.compute(sphere)

        second = CNC(method=method)
        second.set_eval_point(sphere[100])
        second.compute_with_ids(range(len(sphere)), sphere)

        assert first.is_approx(second, 1e-12)


# ── Accessors and lifecycle ─────────────────────────────────────────

class TestAccessors:

    def test_states(self, sphere):
        fit = CNC(method="hexagram")
        assert fit.state == FitState.INITIALIZED
        assert fit.result is None
        fit.set_eval_point(sphere[5])
        fit.compute_with_ids(radius_neighbors(sphere, 5, 0.5), sphere)
        assert fit.state == FitState.FINALIZED
        assert fit.is_stable

    def test_get_triangles(self, sphere):
        fit = fit_at(sphere, 100, "uniform", seed=2)
        out = [[9.0, 9.0, 9.0]]
        returned = fit.get_triangles(out)
        assert returned is out
        assert len(out) == 1 + 3 * fit.get_num_triangles()
        assert all(len(vertex) == 3 for vertex in out)
        np.testing.assert_array_equal(out[1:4], fit.triangles[0].points)

    def test_tensor_is_symmetric(self, sphere):
        fit = fit_at(sphere, 100, "independent", seed=4)
        T = fit.tensor
        np.testing.assert_array_equal(T, T.T)
        T11, T12, T13, T22, T23, T33 = fit.tensor_components
        assert (T11, T22, T33) == (T[0, 0], T[1, 1], T[2, 2])
        assert (T12, T13, T23) == (T[0, 1], T[0, 2], T[1, 2])

    def test_instance_is_reusable(self, sphere, sphere_radius):
        fit = CNC(method="avg_hexagram")
        for index in (10, 20):
            fit.set_eval_point(sphere[index])
            fit.compute_with_ids(radius_neighbors(sphere, index, 0.5), sphere)
            assert fit.get_num_triangles() == 2
            assert fit.kmean() == pytest.approx(1.0 / sphere_radius, rel=1e-6)

    def test_accepts_a_list_of_points(self, sphere):
        points = [OrientedPoint(p.pos, p.normal) for p in sphere]
        fit = CNC(method="hexagram")
        fit.set_eval_point(points[100])
        fit.compute_with_ids(radius_neighbors(sphere, 100, 0.5), points)
        assert fit == fit_at(sphere, 100, "hexagram")

    def test_uniform_without_eval_point_uses_triangle_normals(self, sphere, sphere_radius):
        fit = CNC(method="uniform", seed=8)
        assert fit.compute_with_ids(radius_neighbors(sphere, 300, 0.5), sphere) == FitResult.STABLE
        assert fit.kmin() == pytest.approx(1.0 / sphere_radius, rel=0.15)
        assert fit.kmax() == pytest.approx(1.0 / sphere_radius, rel=0.15)

    def test_cloud_is_not_modified(self, sphere):
        before = sphere.positions.copy()
        fit_at(sphere, 100, "uniform", seed=0)
        np.testing.assert_array_equal(sphere.positions, before)
        assert not sphere.positions.flags.writeable

    def test_comparison_with_other_types(self):
        assert CNC() != "fit"
