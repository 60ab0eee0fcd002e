"""
Shared fixtures: sampled spheres and planes with exact normals.
"""

import numpy as np
import pytest
from scipy.spatial import cKDTree

from cnccurvature import PointCloud


def fibonacci_sphere(n_points: int, radius: float, center=(0.0, 0.0, 0.0)) -> PointCloud:
    """Evenly spread points on a sphere, normals pointing outwards."""
    i = np.arange(n_points) + 0.5
    phi = np.arccos(1.0 - 2.0 * i / n_points)
    theta = np.pi * (1.0 + np.sqrt(5.0)) * i
    normals = np.column_stack((
        np.cos(theta) * np.sin(phi),
        np.sin(theta) * np.sin(phi),
        np.cos(phi),
    ))
    positions = np.asarray(center, dtype=np.float64) + radius * normals
    return PointCloud(positions, normals)


def jittered_plane(n_side: int, spacing: float, seed: int = 0) -> PointCloud:
    """Grid on the z = 0 plane with small in-plane jitter, normals along +z."""
    rng = np.random.default_rng(seed)
    x, y = np.meshgrid(np.arange(n_side) * spacing, np.arange(n_side) * spacing)
    xy = np.column_stack((x.ravel(), y.ravel()))
    xy += rng.uniform(-0.2 * spacing, 0.2 * spacing, size=xy.shape)
    positions = np.column_stack((xy, np.zeros(len(xy))))
    normals = np.tile([0.0, 0.0, 1.0], (len(xy), 1))
    return PointCloud(positions, normals)


def radius_neighbors(cloud: PointCloud, index: int, radius: float) -> list[int]:
    """Ids of the points within ``radius`` of point ``index``, sorted."""
    tree = cKDTree(cloud.positions)
    return sorted(tree.query_ball_point(cloud.positions[index], radius))


@pytest.fixture
def sphere():
    """2000 points on a sphere of radius 2 centered away from the origin."""
    return fibonacci_sphere(2000, radius=2.0, center=(1.0, -3.0, 0.5))


@pytest.fixture
def sphere_radius():
    return 2.0


@pytest.fixture
def plane():
    return jittered_plane(20, spacing=0.1)
