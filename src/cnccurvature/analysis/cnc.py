from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Iterable

import numpy as np

from cnccurvature.analysis.formulas import curvatures_from_tensor
from cnccurvature.analysis.generators import TriangleGenerationMethod, make_generator
from cnccurvature.analysis.points import OrientedPoint, PointCloud
from cnccurvature.analysis.ranges import BoundedIndexRange
from cnccurvature.config import (
    DEFAULT_AVG_NORMALS,
    DEFAULT_EPSILON,
    DEFAULT_MAX_TRIANGLES,
    GenerationParameters,
)
from cnccurvature.exceptions import DegenerateNeighborhoodError

if TYPE_CHECKING:
    import numpy.typing as npt
    from cnccurvature.analysis.triangle import Triangle

logger = logging.getLogger(__name__)


class FitResult(StrEnum):
    STABLE = "stable"
    UNSTABLE = "unstable"
    UNDEFINED = "undefined"


class FitState(StrEnum):
    INITIALIZED = "initialized"
    TRIANGLES_GENERATED = "triangles_generated"
    FINALIZED = "finalized"


class CNC:
    """
    Corrected Normal Current curvature estimator.

    One instance estimates the curvature at one evaluation point: it builds
    ghost triangles out of the neighborhood with the configured generation
    method, integrates the CNC measures over them and diagonalizes the
    resulting curvature tensor in the tangent plane.

    Example:
        >>> fit = CNC(method="avg_hexagram")
        >>> fit.set_eval_point(cloud[i])
        >>> fit.compute_with_ids(neighbor_ids, cloud)
        >>> fit.kmin(), fit.kmax()
    """

    def __init__(
        self,
        method: TriangleGenerationMethod | str = TriangleGenerationMethod.UNIFORM,
        max_triangles: int = DEFAULT_MAX_TRIANGLES,
        avg_normals: float = DEFAULT_AVG_NORMALS,
        epsilon: float = DEFAULT_EPSILON,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Initialize the estimator.

        Args:
            method: Triangle generation method.
            max_triangles: Attempt budget (uniform) or triangle cap (independent).
            avg_normals: Weight of the mean neighbor normal in the hexagram frame.
            epsilon: Triangles with ``|mu0| <= epsilon`` are ignored.
            seed: Seed of the instance random generator, ignored if ``rng`` is given.
            rng: Random generator owned by this instance.
        """
        if epsilon < 0.0:
            raise ValueError(f"'epsilon' must be non-negative, got {epsilon}.")
        self.method = TriangleGenerationMethod(method)
        self.params = GenerationParameters(max_triangles=max_triangles, avg_normals=avg_normals)
        self.epsilon = float(epsilon)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.generator = make_generator(self.method, self.params, self.rng)

        self._eval_position: npt.NDArray[np.float64] | None = None
        self._eval_normal: npt.NDArray[np.float64] | None = None

        self.init()

    def __repr__(self) -> str:
        """String representation of the estimator."""
        return (
            f"{self.__class__.__name__}(method='{self.method}', state='{self.state}', "
            f"kmin={self._k1:.6g}, kmax={self._k2:.6g})"
        )

    def init(self) -> None:
        """Reset the triangles, the accumulators and the results."""
        self._triangles: list[Triangle] = []
        self._A: float = 0.0
        self._H: float = 0.0
        self._G: float = 0.0
        self._T: npt.NDArray[np.float64] = np.zeros((3, 3), dtype=np.float64)

        self._k1: float = 0.0
        self._k2: float = 0.0
        self._v1: npt.NDArray[np.float64] = np.zeros(3, dtype=np.float64)
        self._v2: npt.NDArray[np.float64] = np.zeros(3, dtype=np.float64)

        self._state = FitState.INITIALIZED
        self._result: FitResult | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_eval_point(self, point: OrientedPoint) -> None:
        """Set the position and the normal of the evaluation point."""
        self._eval_position = np.array(point.pos, dtype=np.float64)
        self.set_eval_point_normal(point.normal)

    def set_eval_point_normal(self, normal: npt.ArrayLike) -> None:
        """Set the normal used to select the tangent plane."""
        normal = np.array(normal, dtype=np.float64)
        if normal.shape != (3,):
            raise ValueError(f"The normal must be a 3D vector, got shape {normal.shape}.")
        self._eval_normal = normal

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------
    def compute(self, points: PointCloud | Iterable[OrientedPoint]) -> FitResult:
        """
        Estimate the curvature using every point of the container as neighbor.

        Args:
            points: Point container, left untouched.

        Returns:
            Status of the estimation.
        """
        cloud = PointCloud.coerce(points)
        return self._run(BoundedIndexRange.over(cloud), cloud)

    def compute_with_ids(
        self,
        ids: Iterable[int],
        points: PointCloud | Iterable[OrientedPoint],
    ) -> FitResult:
        """
        Estimate the curvature using the given point ids as neighbors.

        Args:
            ids: Indices into ``points``, e.g. the result of a range query.
            points: Point container, left untouched.

        Returns:
            Status of the estimation.
        """
        cloud = PointCloud.coerce(points)
        return self._run(BoundedIndexRange.from_ids(ids), cloud)

    def _run(self, index_range: BoundedIndexRange, cloud: PointCloud) -> FitResult:
        self.init()
        try:
            self._triangles = self.generator.generate(
                index_range, cloud, self._eval_position, self._eval_normal
            )
        except DegenerateNeighborhoodError as e:
            logger.warning(f"Degenerate neighborhood, no curvature estimated: {e}")
            self._result = FitResult.UNDEFINED
            return self._result

        self._state = FitState.TRIANGLES_GENERATED
        return self.finalize()

    def finalize(self) -> FitResult:
        """
        Integrate the CNC measures over the generated triangles and extract the
        principal curvatures.

        Triangles whose signed area is negative are integrated with the
        alternate vertex order, so that every triangle contributes with the
        orientation of the interpolated normals. Triangles with
        ``|mu0| <= epsilon`` are skipped.

        Returns:
            ``STABLE``, or ``UNSTABLE`` if the result is not finite.
        """
        A = 0.0
        H = 0.0
        G = 0.0
        local_T = np.zeros((3, 3), dtype=np.float64)

        for triangle in self._triangles:
            tA = triangle.mu0()
            if tA < -self.epsilon:
                A -= tA
                H += triangle.mu1(alternate=True)
                G += triangle.mu2(alternate=True)
                local_T += triangle.muxy(alternate=True)
            elif tA > self.epsilon:
                A += tA
                H += triangle.mu1()
                G += triangle.mu2()
                local_T += triangle.muxy()

        # T_ij = (localT_ij + localT_ji) / 2, the diagonal is left as is
        T = 0.5 * (local_T + local_T.T)

        if A != 0.0:
            T /= A
            H /= A
            G /= A
        else:
            logger.debug("Zero total area, curvature set to zero.")
            T = np.zeros((3, 3), dtype=np.float64)
            H = 0.0
            G = 0.0

        self._A = A
        self._H = H
        self._G = G
        self._T = T
        self._k1, self._k2, self._v1, self._v2 = curvatures_from_tensor(T, 1.0, self._tangent_normal())
        self._state = FitState.FINALIZED

        values = np.concatenate(([H, G, self._k1, self._k2], T.ravel()))
        if not np.all(np.isfinite(values)):
            logger.warning("Non-finite curvature estimate.")
            self._result = FitResult.UNSTABLE
        else:
            self._result = FitResult.STABLE

        logger.debug(
            f"Finalized {len(self._triangles)} triangles: area={A:.6g}, "
            f"kmin={self._k1:.6g}, kmax={self._k2:.6g}"
        )
        return self._result

    def _tangent_normal(self) -> npt.NDArray[np.float64]:
        """Normal of the tangent plane the tensor is diagonalized in."""
        if self._eval_normal is not None and np.any(self._eval_normal != 0.0):
            normal = self._eval_normal
        elif self._triangles:
            normal = np.sum([t.normals.sum(axis=0) for t in self._triangles], axis=0)
        else:
            return np.zeros(3, dtype=np.float64)
        norm = np.linalg.norm(normal)
        return normal / norm if norm > 0.0 else normal

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    @property
    def state(self) -> FitState:
        """Current stage of the estimation."""
        return self._state

    @property
    def result(self) -> FitResult | None:
        """Status of the last estimation, None before any."""
        return self._result

    @property
    def is_stable(self) -> bool:
        return self._result == FitResult.STABLE

    @property
    def area(self) -> float:
        """Total area of the triangles that took part in the estimation."""
        return self._A

    @property
    def tensor(self) -> npt.NDArray[np.float64]:
        """Symmetric curvature tensor per unit area."""
        return self._T.copy()

    @property
    def tensor_components(self) -> tuple[float, float, float, float, float, float]:
        """``(T11, T12, T13, T22, T23, T33)``"""
        T = self._T
        return (
            float(T[0, 0]), float(T[0, 1]), float(T[0, 2]),
            float(T[1, 1]), float(T[1, 2]), float(T[2, 2]),
        )

    @property
    def triangles(self) -> list[Triangle]:
        return list(self._triangles)

    def kmin(self) -> float:
        """Smallest principal curvature."""
        return self._k1

    def kmax(self) -> float:
        """Largest principal curvature."""
        return self._k2

    def kmin_direction(self) -> npt.NDArray[np.float64]:
        """Principal direction of the smallest curvature."""
        return self._v1.copy()

    def kmax_direction(self) -> npt.NDArray[np.float64]:
        """Principal direction of the largest curvature."""
        return self._v2.copy()

    def kmean(self) -> float:
        """Mean curvature. ``mu1`` integrates twice the mean curvature."""
        return 0.5 * self._H

    def kgauss(self) -> float:
        """Gaussian curvature."""
        return self._G

    def get_num_triangles(self) -> int:
        return len(self._triangles)

    def get_triangles(self, out: list[list[float]] | None = None) -> list[list[float]]:
        """
        Export the generated triangles as flat coordinate triples.

        Args:
            out: List to append to; a new one is created if omitted.

        Returns:
            ``out`` with three ``[x, y, z]`` entries appended per triangle.
        """
        if out is None:
            out = []
        for triangle in self._triangles:
            out.extend(vertex.tolist() for vertex in triangle.points)
        return out

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        # Fits are compared through their tensors
        if not isinstance(other, CNC):
            return NotImplemented
        return self.tensor_components == other.tensor_components

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def is_approx(self, other: CNC, eps: float) -> bool:
        """Whether both tensors match component-wise within ``eps``."""
        return bool(np.all(
            np.abs(np.subtract(self.tensor_components, other.tensor_components)) <= eps
        ))
