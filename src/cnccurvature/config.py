"""
Configuration & Global Constants
================================
This module serves as the central registry for the numerical constants and the
default generation parameters of the CNC estimator.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (attempt budgets, blending weights,
   thresholds) scattered throughout the generators and the estimator.
2. Thread safety: The hexagram trigonometric tables are computed once at import
   time and frozen, so concurrently running estimators only ever read them.

Exports:
    DEFAULT_MAX_TRIANGLES (int): Attempt budget of the stochastic generators.
    DEFAULT_AVG_NORMALS (float): Weight of the mean neighbor normal in the hexagram frame.
    DEFAULT_EPSILON (float): Absolute |mu0| below which a triangle is ignored.
    NORMAL_PENALTY (float): Weight of N Nᵀ added before diagonalizing the tensor.
    HEXAGRAM_COS, HEXAGRAM_SIN (ndarray): Read-only cos/sin of j·π/3, j = 0..5.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

DEFAULT_MAX_TRIANGLES: int = 100
DEFAULT_AVG_NORMALS: float = 0.5
DEFAULT_EPSILON: float = 1e-12
NORMAL_PENALTY: float = 1000.0

HEXAGRAM_SECTORS: int = 6


def _sector_table(func) -> np.ndarray:
    table = func(np.arange(HEXAGRAM_SECTORS, dtype=np.float64) * np.pi / 3.0)
    table.setflags(write=False)
    return table


HEXAGRAM_COS: np.ndarray = _sector_table(np.cos)
HEXAGRAM_SIN: np.ndarray = _sector_table(np.sin)


@dataclass(frozen=True)
class GenerationParameters:
    """
    Parameters shared by the triangle generators.

    Attributes:
        max_triangles: Attempt budget (Uniform) or upper bound on the number of
            triangles (Independent).
        avg_normals: Blending weight of the mean neighbor normal when building
            the hexagram tangent frame, in [0, 1].
    """
    max_triangles: int = DEFAULT_MAX_TRIANGLES
    avg_normals: float = DEFAULT_AVG_NORMALS

    def __post_init__(self) -> None:
        if self.max_triangles < 0:
            raise ValueError(f"'max_triangles' must be non-negative, got {self.max_triangles}.")
        if not 0.0 <= self.avg_normals <= 1.0:
            raise ValueError(f"'avg_normals' must be in [0, 1], got {self.avg_normals}.")
