"""
Exceptions raised by the CNC curvature estimator.
"""


class CNCError(Exception):
    """Base class for all errors raised by this package."""


class OutOfRangeError(CNCError, IndexError):
    """An index draw or lookup fell outside the validated bounds."""


class DegenerateNeighborhoodError(CNCError, ValueError):
    """The neighborhood holds too few candidates for the generation method."""


class MissingEvalPointError(CNCError, ValueError):
    """A generation method needs an evaluation point but none was set."""
