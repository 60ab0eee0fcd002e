"""
cnccurvature - Corrected Normal Current curvature estimation

Estimates principal curvatures and directions at a point of an oriented point
cloud by integrating the corrected normal current over ghost triangles built
from its neighborhood.

Example:
    >>> from cnccurvature import CNC, PointCloud
    >>>
    >>> cloud = PointCloud(positions, normals)
    >>> fit = CNC(method="hexagram")
    >>> fit.set_eval_point(cloud[0])
    >>> fit.compute_with_ids(neighbor_ids, cloud)
    >>> fit.kmean(), fit.kgauss()
"""

__version__ = "0.1.0"

from cnccurvature.analysis.cnc import CNC, FitResult, FitState
from cnccurvature.analysis.generators import TriangleGenerationMethod
from cnccurvature.analysis.points import OrientedPoint, PointCloud
from cnccurvature.analysis.ranges import BoundedIndexRange
from cnccurvature.analysis.triangle import Triangle
from cnccurvature.exceptions import (
    CNCError,
    DegenerateNeighborhoodError,
    MissingEvalPointError,
    OutOfRangeError,
)
from cnccurvature.logging_config import setup_logging

__all__ = [
    "__version__",
    "CNC",
    "FitResult",
    "FitState",
    "TriangleGenerationMethod",
    "OrientedPoint",
    "PointCloud",
    "BoundedIndexRange",
    "Triangle",
    "CNCError",
    "DegenerateNeighborhoodError",
    "MissingEvalPointError",
    "OutOfRangeError",
    "setup_logging",
]
