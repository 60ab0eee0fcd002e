from __future__ import annotations

from typing import TYPE_CHECKING

from cnccurvature.analysis.generators.generator import TriangleGenerator

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from cnccurvature.analysis.points import PointCloud
    from cnccurvature.analysis.ranges import BoundedIndexRange
    from cnccurvature.analysis.triangle import Triangle


class IndependentGenerator(TriangleGenerator):
    """
    Shuffles the candidates once and cuts the result into disjoint triples.

    No point is shared between two triangles of the same estimation. At most
    ``min(max_triangles, n // 3)`` triangles are produced.
    """

    def _generate(
        self,
        index_range: BoundedIndexRange,
        points: PointCloud,
        eval_position: npt.NDArray[np.float64] | None,
        eval_normal: npt.NDArray[np.float64] | None,
    ) -> list[Triangle]:
        shuffled = self.rng.permutation(index_range.as_array())
        n_triangles = min(self.params.max_triangles, shuffled.size // 3)
        return [
            self.triangle_from_indices(points, shuffled[3 * t:3 * t + 3])
            for t in range(n_triangles)
        ]
