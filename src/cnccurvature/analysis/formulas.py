"""
Corrected Normal Current measures
=================================
Closed-form integrals of a linearly interpolated normal field ``u`` over a
triangle ``(a, b, c)`` with vertex normals ``(ua, ub, uc)``.

With ``uM = (ua + ub + uc) / 3``:

    mu0  = 1/2 <uM | (b - a) x (c - a)>                              (area)
    mu1  = 1/2 (<uM x (uc - ub) | a> + <uM x (ua - uc) | b>
               + <uM x (ub - ua) | c>)                               (2 x mean curvature)
    mu2  = 1/2 det(ua, ub, uc)                                       (Gaussian curvature)
    muXY = 1/2 <uM | (uc - ua)_j (e_i x (b - a)) - (ub - ua)_j (e_i x (c - a))>

All measures change sign under an odd permutation of the vertices.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

from cnccurvature.config import NORMAL_PENALTY

if TYPE_CHECKING:
    import numpy.typing as npt


@nb.jit(cache=True)
def _dot(x: npt.NDArray[np.float64], y: npt.NDArray[np.float64]) -> float:
    return x[0] * y[0] + x[1] * y[1] + x[2] * y[2]


@nb.jit(cache=True)
def _cross(x: npt.NDArray[np.float64], y: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    out = np.empty(3, dtype=np.float64)
    out[0] = x[1] * y[2] - x[2] * y[1]
    out[1] = x[2] * y[0] - x[0] * y[2]
    out[2] = x[0] * y[1] - x[1] * y[0]
    return out


@nb.jit(cache=True)
def _normalized(x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    norm = np.sqrt(_dot(x, x))
    if norm > 0.0:
        return x / norm
    return x.copy()


@nb.jit(cache=True)
def _mean_normal(
    ua: npt.NDArray[np.float64],
    ub: npt.NDArray[np.float64],
    uc: npt.NDArray[np.float64],
    unit_u: bool
) -> npt.NDArray[np.float64]:
    um = (ua + ub + uc) / 3.0
    if unit_u:
        return _normalized(um)
    return um


@nb.jit(cache=True)
def mu0_interpolated_u(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    c: npt.NDArray[np.float64],
    ua: npt.NDArray[np.float64],
    ub: npt.NDArray[np.float64],
    uc: npt.NDArray[np.float64],
    unit_u: bool = False
) -> float:
    """
    Signed area measure of the triangle.

    Args:
        a, b, c: Vertex positions.
        ua, ub, uc: Vertex normals.
        unit_u: Normalize the mean normal before use.

    Returns:
        Positive when the winding agrees with the interpolated normals.
    """
    um = _mean_normal(ua, ub, uc, unit_u)
    return 0.5 * _dot(_cross(b - a, c - a), um)


@nb.jit(cache=True)
def mu1_interpolated_u(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    c: npt.NDArray[np.float64],
    ua: npt.NDArray[np.float64],
    ub: npt.NDArray[np.float64],
    uc: npt.NDArray[np.float64],
    unit_u: bool = False
) -> float:
    """
    Mean curvature measure of the triangle (twice the integrated mean curvature).

    Args:
        a, b, c: Vertex positions.
        ua, ub, uc: Vertex normals.
        unit_u: Normalize the mean normal before use.
    """
    um = _mean_normal(ua, ub, uc, unit_u)
    return 0.5 * (
        _dot(_cross(um, uc - ub), a)
        + _dot(_cross(um, ua - uc), b)
        + _dot(_cross(um, ub - ua), c)
    )


@nb.jit(cache=True)
def mu2_interpolated_u(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    c: npt.NDArray[np.float64],
    ua: npt.NDArray[np.float64],
    ub: npt.NDArray[np.float64],
    uc: npt.NDArray[np.float64],
    unit_u: bool = False
) -> float:
    """
    Gaussian curvature measure of the triangle.

    With unit normals this is the algebraic area of the spherical triangle
    ``(ua, ub, uc)``, otherwise half the determinant of the three normals.
    Positions are unused and kept for a uniform signature.

    Args:
        a, b, c: Vertex positions.
        ua, ub, uc: Vertex normals.
        unit_u: Treat the normals as points of the unit sphere.
    """
    if unit_u:
        na = _normalized(ua)
        nb_ = _normalized(ub)
        nc = _normalized(uc)
        det = _dot(na, _cross(nb_, nc))
        denominator = 1.0 + _dot(na, nb_) + _dot(nb_, nc) + _dot(nc, na)
        return 2.0 * np.arctan2(det, denominator)
    return 0.5 * _dot(ua, _cross(ub, uc))


@nb.jit(cache=True)
def muxy_interpolated_u(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    c: npt.NDArray[np.float64],
    ua: npt.NDArray[np.float64],
    ub: npt.NDArray[np.float64],
    uc: npt.NDArray[np.float64],
    unit_u: bool = False
) -> npt.NDArray[np.float64]:
    """
    Anisotropic (3, 3) measure of the triangle.

    Uses ``<uM | e_i x v> = (v x uM)_i`` so that
    ``T_ij = 1/2 ((uc - ua)_j (ab x uM)_i - (ub - ua)_j (ac x uM)_i)``.

    Args:
        a, b, c: Vertex positions.
        ua, ub, uc: Vertex normals.
        unit_u: Normalize the mean normal before use.
    """
    um = _mean_normal(ua, ub, uc, unit_u)
    uac = uc - ua
    uab = ub - ua
    ab_um = _cross(b - a, um)
    ac_um = _cross(c - a, um)

    T = np.empty((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            T[i, j] = 0.5 * (uac[j] * ab_um[i] - uab[j] * ac_um[i])
    return T


def curvatures_from_tensor(
    T: npt.NDArray[np.float64],
    area: float,
    normal: npt.NDArray[np.float64],
) -> tuple[float, float, npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Principal curvatures and directions from an anisotropic curvature measure.

    The measure is symmetrized and ``NORMAL_PENALTY * area * N Nᵀ`` is added so
    that the normal direction carries the largest eigenvalue; the two remaining
    eigenpairs span the tangent plane. Curvatures are the opposite of those
    eigenvalues.

    Args:
        T: (3, 3) curvature measure, already divided by the area or not.
        area: Area the measure refers to (1.0 for a normalized measure).
        normal: Surface normal at the evaluation point.

    Returns:
        ``(k1, k2, v1, v2)`` with ``k1 <= k2`` and unit directions ``v1``, ``v2``.
    """
    M = 0.5 * (T + T.T)
    M = M + NORMAL_PENALTY * area * np.outer(normal, normal)

    # Ascending eigenvalues: L[0] <= L[1] <= L[2], L[2] along the normal
    L, V = np.linalg.eigh(M)
    return -float(L[1]), -float(L[0]), V[:, 1].copy(), V[:, 0].copy()
