"""
Hexagram generators
===================
Both strategies lay six targets on a circle of the tangent plane, 60° apart,
at the average neighbor distance around the evaluation point, fill one vertex
per target, and join the even and the odd targets into two triangles that
draw a "Star of David" around the evaluation point.

    Hexagram     keeps the closest neighbor of each target.
    AvgHexagram  averages every neighbor whose closest target it is.

Neither strategy draws random numbers: the result only depends on the set of
candidates, not on their order.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from cnccurvature.analysis.generators.generator import TriangleGenerator
from cnccurvature.analysis.triangle import Triangle
from cnccurvature.config import HEXAGRAM_COS, HEXAGRAM_SIN, HEXAGRAM_SECTORS

if TYPE_CHECKING:
    import numpy.typing as npt
    from cnccurvature.analysis.points import PointCloud
    from cnccurvature.analysis.ranges import BoundedIndexRange

# Targets joined into the two triangles of the star
EVEN_SECTORS = (0, 2, 4)
ODD_SECTORS = (1, 3, 5)


def _normalized(x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    norm = np.linalg.norm(x)
    return x / norm if norm > 0.0 else x


def blended_normal(
    eval_normal: npt.NDArray[np.float64],
    neighbor_normals: npt.NDArray[np.float64],
    avg_normals: float,
) -> npt.NDArray[np.float64]:
    """
    Mix the evaluation normal with the mean neighbor normal.

    ``n = normalize((1 - w) * n_eval + w * normalize(sum(neighbor normals)))``.
    Falls back to the evaluation normal when the neighbor normals sum to zero
    or when the mix vanishes.
    """
    n = _normalized(np.asarray(eval_normal, dtype=np.float64))
    mean_normal = neighbor_normals.sum(axis=0)
    if np.linalg.norm(mean_normal) == 0.0:
        return n
    mixed = (1.0 - avg_normals) * n + avg_normals * _normalized(mean_normal)
    if np.linalg.norm(mixed) <= np.finfo(np.float64).eps:
        return n
    return _normalized(mixed)


def tangent_basis(n: npt.NDArray[np.float64]) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Two orthonormal tangent vectors ``(u, v)`` for the normal ``n``.

    The helper axis is the one following the dominant component of ``n``, so
    that it is never parallel to ``n``.
    """
    ax, ay, az = np.abs(n)
    if ax > ay:
        m = 0 if ax > az else 2
    else:
        m = 1 if ay > az else 2
    e = np.zeros(3)
    e[(m + 1) % 3] = 1.0

    u = np.cross(n, e)
    v = np.cross(n, u)
    return _normalized(u), _normalized(v)


def hexagram_targets(
    positions: npt.NDArray[np.float64],
    normals: npt.NDArray[np.float64],
    eval_position: npt.NDArray[np.float64],
    eval_normal: npt.NDArray[np.float64],
    avg_normals: float,
) -> tuple[npt.NDArray[np.float64], float]:
    """
    Offsets of the six sector targets relative to the evaluation point.

    Args:
        positions: (k, 3) neighbor positions.
        normals: (k, 3) neighbor normals.
        eval_position: Evaluation point position.
        eval_normal: Evaluation point normal.
        avg_normals: Weight of the mean neighbor normal in the frame.

    Returns:
        ``(targets, avgd)``: the (6, 3) target offsets and the average neighbor
        distance used as the star radius.
    """
    n = blended_normal(eval_normal, normals, avg_normals)
    avgd = float(np.linalg.norm(positions - eval_position, axis=1).mean())
    u, v = tangent_basis(n)
    targets = avgd * (np.outer(HEXAGRAM_COS, u) + np.outer(HEXAGRAM_SIN, v))
    return targets, avgd


class _HexagramBase(TriangleGenerator):
    min_candidates = 1
    requires_eval_point = True

    def _generate(
        self,
        index_range: BoundedIndexRange,
        points: PointCloud,
        eval_position: npt.NDArray[np.float64] | None,
        eval_normal: npt.NDArray[np.float64] | None,
    ) -> list[Triangle]:
        c = np.asarray(eval_position, dtype=np.float64)
        n_eval = np.asarray(eval_normal, dtype=np.float64)
        ids = index_range.as_array()
        positions = points.positions[ids]
        normals = points.normals[ids]

        targets, avgd = hexagram_targets(positions, normals, c, n_eval, self.params.avg_normals)

        # Squared distance of every neighbor to every target, (k, 6)
        d = positions - c
        d2 = ((d[:, None, :] - targets[None, :, :]) ** 2).sum(axis=2)
        # The evaluation point itself never fills a sector
        d2[np.all(positions == c, axis=1)] = np.inf

        vertices, vertex_normals = self._fill_sectors(positions, normals, d2, avgd, c, n_eval)
        return [
            Triangle(vertices[list(EVEN_SECTORS)], vertex_normals[list(EVEN_SECTORS)]),
            Triangle(vertices[list(ODD_SECTORS)], vertex_normals[list(ODD_SECTORS)]),
        ]

    @abstractmethod
    def _fill_sectors(
        self,
        positions: npt.NDArray[np.float64],
        normals: npt.NDArray[np.float64],
        d2: npt.NDArray[np.float64],
        avgd: float,
        c: npt.NDArray[np.float64],
        n_eval: npt.NDArray[np.float64],
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Sector vertex positions and normals, (6, 3) each."""
        pass


class HexagramGenerator(_HexagramBase):
    """
    Picks, for each of the six targets, the closest neighbor.

    A neighbor only qualifies when it is closer to the target than the star
    radius; ties go to the first candidate. Sectors without a qualifying
    neighbor use the evaluation point.
    """

    def _fill_sectors(self, positions, normals, d2, avgd, c, n_eval):
        vertices = np.tile(c, (HEXAGRAM_SECTORS, 1))
        vertex_normals = np.tile(n_eval, (HEXAGRAM_SECTORS, 1))
        for j in range(HEXAGRAM_SECTORS):
            # argmin returns the first minimum, i.e. the first-seen closest
            best = int(np.argmin(d2[:, j]))
            if d2[best, j] < avgd * avgd:
                vertices[j] = positions[best]
                vertex_normals[j] = normals[best]
        return vertices, vertex_normals


class AvgHexagramGenerator(_HexagramBase):
    """
    Assigns every neighbor to its closest target and averages each sector.

    Sector vertices are the mean position and the mean normal of the sector's
    neighbors; empty sectors use the evaluation point.
    """

    def _fill_sectors(self, positions, normals, d2, avgd, c, n_eval):
        vertices = np.tile(c, (HEXAGRAM_SECTORS, 1))
        vertex_normals = np.tile(n_eval, (HEXAGRAM_SECTORS, 1))
        valid = np.isfinite(d2[:, 0])
        owner = np.argmin(d2, axis=1)
        for j in range(HEXAGRAM_SECTORS):
            members = valid & (owner == j)
            if members.any():
                vertices[j] = positions[members].mean(axis=0)
                vertex_normals[j] = normals[members].mean(axis=0)
        return vertices, vertex_normals
