from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import numpy as np

from cnccurvature.analysis.triangle import Triangle
from cnccurvature.config import GenerationParameters
from cnccurvature.exceptions import (
    DegenerateNeighborhoodError,
    MissingEvalPointError,
    OutOfRangeError,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from cnccurvature.analysis.points import PointCloud
    from cnccurvature.analysis.ranges import BoundedIndexRange

logger = logging.getLogger(__name__)


class TriangleGenerator(ABC):
    """
    Abstract base class for the strategies building ghost triangles out of a
    neighborhood.
    """
    #: Smallest neighborhood the strategy can work with.
    min_candidates: int = 3
    #: Whether the strategy reads the evaluation point.
    requires_eval_point: bool = False

    def __init__(
        self,
        params: GenerationParameters | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            params: Generation parameters, defaults if omitted.
            rng: Random generator owned by this instance. A fresh, OS-seeded one
                is created if omitted.
        """
        self.params = params if params is not None else GenerationParameters()
        self.rng = rng if rng is not None else np.random.default_rng()

    def __repr__(self) -> str:
        """String representation of the generator."""
        return f"{self.__class__.__name__}(params={self.params})"

    def generate(
        self,
        index_range: BoundedIndexRange,
        points: PointCloud,
        eval_position: npt.NDArray[np.float64] | None = None,
        eval_normal: npt.NDArray[np.float64] | None = None,
    ) -> list[Triangle]:
        """
        Build the triangles of the neighborhood.

        Args:
            index_range: Candidate point indices.
            points: Point container the indices refer to.
            eval_position: Position of the evaluation point.
            eval_normal: Normal of the evaluation point.

        Raises:
            DegenerateNeighborhoodError: If the range holds too few candidates.
            MissingEvalPointError: If the strategy needs the evaluation point and
                none is given.
            OutOfRangeError: If a candidate index is not a valid point index.

        Returns:
            The generated triangles; their number may be lower than requested.
        """
        self.check_neighborhood(index_range, points)
        if self.requires_eval_point and (eval_position is None or eval_normal is None):
            raise MissingEvalPointError(
                f"{self.__class__.__name__} needs an evaluation point, call set_eval_point() first."
            )
        triangles = self._generate(index_range, points, eval_position, eval_normal)
        logger.debug(
            f"{self.__class__.__name__} generated {len(triangles)} triangles "
            f"from {index_range.size} candidates."
        )
        return triangles

    def check_neighborhood(self, index_range: BoundedIndexRange, points: PointCloud) -> None:
        """Validate the candidate indices before any draw."""
        if index_range.size < self.min_candidates:
            raise DegenerateNeighborhoodError(
                f"{self.__class__.__name__} needs at least {self.min_candidates} candidates, "
                f"got {index_range.size}."
            )
        ids = index_range.as_array()
        if ids.size and (ids.min() < 0 or ids.max() >= len(points)):
            raise OutOfRangeError(
                f"Candidate indices must be in range: 0 <= i < {len(points)}, "
                f"but got values in [{ids.min()}, {ids.max()}]."
            )

    @abstractmethod
    def _generate(
        self,
        index_range: BoundedIndexRange,
        points: PointCloud,
        eval_position: npt.NDArray[np.float64] | None,
        eval_normal: npt.NDArray[np.float64] | None,
    ) -> list[Triangle]:
        """Strategy-specific triangle construction on a validated neighborhood."""
        pass

    @staticmethod
    def triangle_from_indices(points: PointCloud, indices: Sequence[int]) -> Triangle:
        """Copy three points of the container into a triangle."""
        indices = list(indices)
        return Triangle(points.positions[indices], points.normals[indices])
