"""
Triangle generation strategies.

The set of strategies is closed: every member of ``TriangleGenerationMethod``
maps to exactly one generator class in ``GENERATORS``.
"""
from __future__ import annotations

from enum import StrEnum

import numpy as np

from cnccurvature.analysis.generators.generator import TriangleGenerator
from cnccurvature.analysis.generators.hexagram import AvgHexagramGenerator, HexagramGenerator
from cnccurvature.analysis.generators.independent import IndependentGenerator
from cnccurvature.analysis.generators.uniform import UniformGenerator
from cnccurvature.config import GenerationParameters


class TriangleGenerationMethod(StrEnum):
    UNIFORM = "uniform"
    INDEPENDENT = "independent"
    HEXAGRAM = "hexagram"
    AVG_HEXAGRAM = "avg_hexagram"


GENERATORS: dict[TriangleGenerationMethod, type[TriangleGenerator]] = {
    TriangleGenerationMethod.UNIFORM: UniformGenerator,
    TriangleGenerationMethod.INDEPENDENT: IndependentGenerator,
    TriangleGenerationMethod.HEXAGRAM: HexagramGenerator,
    TriangleGenerationMethod.AVG_HEXAGRAM: AvgHexagramGenerator,
}


def make_generator(
    method: TriangleGenerationMethod | str,
    params: GenerationParameters | None = None,
    rng: np.random.Generator | None = None,
) -> TriangleGenerator:
    """
    Instantiate the generator of a generation method.

    Raises:
        ValueError: If ``method`` is not a known generation method.
    """
    return GENERATORS[TriangleGenerationMethod(method)](params=params, rng=rng)


__all__ = [
    "TriangleGenerationMethod",
    "TriangleGenerator",
    "UniformGenerator",
    "IndependentGenerator",
    "HexagramGenerator",
    "AvgHexagramGenerator",
    "GENERATORS",
    "make_generator",
]
