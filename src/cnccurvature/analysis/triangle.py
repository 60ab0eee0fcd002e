from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from cnccurvature.analysis.formulas import (
    mu0_interpolated_u,
    mu1_interpolated_u,
    mu2_interpolated_u,
    muxy_interpolated_u,
)

if TYPE_CHECKING:
    import numpy.typing as npt


# Vertex orders fed to the CNC formulas. The alternate order is an odd
# permutation, which flips the sign of every measure.
STANDARD_ORDER = (0, 1, 2)
ALTERNATE_ORDER = (0, 2, 1)


class Triangle:
    """
    Represents a "ghost" triangle built from three oriented points of a cloud.

    Positions and normals are copied at construction time, so a triangle does
    not keep the point container alive. Two triangles are equal when their
    positions are equal; the normals do not take part in the comparison.
    """
    __slots__ = ("points", "normals")

    def __init__(
        self,
        points: npt.ArrayLike,
        normals: npt.ArrayLike,
    ) -> None:
        """
        Initialize the triangle.

        Args:
            points: (3, 3) array, one vertex position per row.
            normals: (3, 3) array, one vertex normal per row.
        """
        points = np.array(points, dtype=np.float64)
        normals = np.array(normals, dtype=np.float64)
        if points.shape != (3, 3) or normals.shape != (3, 3):
            raise ValueError(
                f"A triangle needs (3, 3) positions and normals, got {points.shape} and {normals.shape}."
            )
        points.setflags(write=False)
        normals.setflags(write=False)
        self.points: npt.NDArray[np.float64] = points
        self.normals: npt.NDArray[np.float64] = normals

    def __repr__(self) -> str:
        """String representation of the triangle."""
        return f"{self.__class__.__name__}(points={self.points.tolist()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return bool(np.array_equal(self.points, other.points))

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash(self.points.tobytes())

    def _ordered(self, alternate: bool) -> tuple[npt.NDArray[np.float64], ...]:
        order = ALTERNATE_ORDER if alternate else STANDARD_ORDER
        return (
            *(self.points[i] for i in order),
            *(self.normals[i] for i in order),
        )

    def mu0(self, alternate: bool = False, unit_u: bool = False) -> float:
        """Signed area measure; negative when the winding opposes the normals."""
        return float(mu0_interpolated_u(*self._ordered(alternate), unit_u))

    def mu1(self, alternate: bool = False, unit_u: bool = False) -> float:
        """Mean curvature measure."""
        return float(mu1_interpolated_u(*self._ordered(alternate), unit_u))

    def mu2(self, alternate: bool = False, unit_u: bool = False) -> float:
        """Gaussian curvature measure."""
        return float(mu2_interpolated_u(*self._ordered(alternate), unit_u))

    def muxy(self, alternate: bool = False, unit_u: bool = False) -> npt.NDArray[np.float64]:
        """Anisotropic (3, 3) curvature measure."""
        return muxy_interpolated_u(*self._ordered(alternate), unit_u)

    def reversed(self) -> Triangle:
        """Same triangle with the opposite winding."""
        order = list(ALTERNATE_ORDER)
        return Triangle(self.points[order], self.normals[order])
