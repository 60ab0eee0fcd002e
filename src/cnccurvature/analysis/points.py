from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


class OrientedPoint:
    """
    Represents a point of the cloud: a position and its normal.
    """
    def __init__(
        self,
        pos: list[float] | npt.NDArray[np.float64],
        normal: list[float] | npt.NDArray[np.float64],
    ) -> None:
        """
        Initialize the oriented point.

        Args:
            pos: Position in the global system [X, Y, Z].
            normal: Normal vector at the position.
        """
        self.pos = np.array(pos, dtype=np.float64)
        self.normal = np.array(normal, dtype=np.float64)
        if self.pos.shape != (3,) or self.normal.shape != (3,):
            raise ValueError(
                f"Position and normal must be 3D vectors, got shapes {self.pos.shape} and {self.normal.shape}."
            )

    def __repr__(self) -> str:
        """String representation of the point."""
        return f"{self.__class__.__name__}(pos={self.pos}, normal={self.normal})"


class PointCloud:
    """
    Read-only container of oriented points stored as two ``(N, 3)`` arrays.

    The arrays are copied on construction and flagged non-writeable, so a cloud
    can be shared between estimators running side by side.
    """
    def __init__(
        self,
        positions: npt.ArrayLike,
        normals: npt.ArrayLike,
    ) -> None:
        """
        Initialize the cloud.

        Args:
            positions: ``(N, 3)`` array of positions.
            normals: ``(N, 3)`` array of normals, one per position.

        Raises:
            ValueError: If the arrays do not have matching ``(N, 3)`` shapes.
        """
        positions = np.array(positions, dtype=np.float64).reshape(-1, 3)
        normals = np.array(normals, dtype=np.float64).reshape(-1, 3)
        if positions.shape != normals.shape:
            raise ValueError(
                f"Positions and normals must have the same shape, got {positions.shape} and {normals.shape}."
            )
        positions.setflags(write=False)
        normals.setflags(write=False)
        self.positions: npt.NDArray[np.float64] = positions
        self.normals: npt.NDArray[np.float64] = normals

    @classmethod
    def from_points(cls, points: Iterable[OrientedPoint]) -> PointCloud:
        """Build a cloud from a sequence of :class:`OrientedPoint`."""
        points = list(points)
        return cls(
            [p.pos for p in points],
            [p.normal for p in points],
        )

    @classmethod
    def coerce(cls, points: PointCloud | Iterable[OrientedPoint]) -> PointCloud:
        """Return ``points`` unchanged if it is a cloud, convert it otherwise."""
        if isinstance(points, PointCloud):
            return points
        return cls.from_points(points)

    def __repr__(self) -> str:
        """String representation of the cloud."""
        return f"{self.__class__.__name__}(n_points={len(self)})"

    def __len__(self) -> int:
        return self.positions.shape[0]

    def __getitem__(self, index: int) -> OrientedPoint:
        return OrientedPoint(self.positions[index], self.normals[index])

    def __iter__(self) -> Iterator[OrientedPoint]:
        for i in range(len(self)):
            yield self[i]
