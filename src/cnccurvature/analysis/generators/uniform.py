from __future__ import annotations

from typing import TYPE_CHECKING

from cnccurvature.analysis.generators.generator import TriangleGenerator

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from cnccurvature.analysis.points import PointCloud
    from cnccurvature.analysis.ranges import BoundedIndexRange
    from cnccurvature.analysis.triangle import Triangle


class UniformGenerator(TriangleGenerator):
    """
    Draws three candidates uniformly at random for every attempt.

    Draws sharing an index are rejected, so fewer than ``max_triangles``
    triangles may come out. A point can be reused by several triangles.
    """

    def _generate(
        self,
        index_range: BoundedIndexRange,
        points: PointCloud,
        eval_position: npt.NDArray[np.float64] | None,
        eval_normal: npt.NDArray[np.float64] | None,
    ) -> list[Triangle]:
        triangles = []
        for _ in range(self.params.max_triangles):
            i1 = index_range.random(self.rng)
            i2 = index_range.random(self.rng)
            i3 = index_range.random(self.rng)
            if i1 == i2 or i1 == i3 or i2 == i3:
                continue
            triangles.append(self.triangle_from_indices(points, (i1, i2, i3)))
        return triangles
