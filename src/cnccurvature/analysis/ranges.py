from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, Sequence, Sized

import numpy as np

from cnccurvature.exceptions import OutOfRangeError

if TYPE_CHECKING:
    import numpy.typing as npt


class BoundedIndexRange:
    """
    Half-open range of slots ``[n_min, n_max)``, optionally indirected through an
    external container of indices.

    Without ``elements`` the slot *is* the index. With ``elements`` the slot ``i``
    maps to ``elements[i]``; only the slot is validated, never the stored value.
    Every generation method is written against this class, so it does not matter
    whether the candidates are all the points of a cloud or a list of neighbor ids.
    """

    def __init__(
        self,
        n_max: int,
        n_min: int = 0,
        elements: Sequence[int] | npt.NDArray[np.int64] | None = None,
    ) -> None:
        """
        Initialize the range.

        Args:
            n_max: Exclusive upper bound.
            n_min: Inclusive lower bound.
            elements: Optional container the slots are looked up in.

        Raises:
            ValueError: If ``n_max < n_min`` or if the bounds exceed ``elements``.
        """
        n_min = int(n_min)
        n_max = int(n_max)
        if n_max < n_min:
            raise ValueError(f"Upper bound ({n_max}) must not be lower than lower bound ({n_min}).")
        if elements is not None and (n_min < 0 or n_max > len(elements)):
            raise ValueError(
                f"Bounds [{n_min}, {n_max}) exceed the {len(elements)} available elements."
            )
        self.n_min = n_min
        self.n_max = n_max
        self._elements = elements

    @classmethod
    def over(cls, points: Sized) -> BoundedIndexRange:
        """Range covering every index of ``points``."""
        return cls(len(points))

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> BoundedIndexRange:
        """Indirected range over an enumerable collection of point ids."""
        elements = np.fromiter((int(i) for i in ids), dtype=np.int64)
        elements.setflags(write=False)
        return cls(len(elements), elements=elements)

    def __repr__(self) -> str:
        """String representation of the range."""
        kind = "indirect" if self.is_indirect else "direct"
        return f"{self.__class__.__name__}([{self.n_min}, {self.n_max}), {kind})"

    @property
    def is_indirect(self) -> bool:
        """Whether slots are looked up in an external container."""
        return self._elements is not None

    @property
    def size(self) -> int:
        """Number of slots in the range."""
        return self.n_max - self.n_min

    def __len__(self) -> int:
        return self.size

    def verify_bounds(self, i: int) -> None:
        """
        Check that ``i`` lies in ``[n_min, n_max)``.

        Raises:
            OutOfRangeError: If it does not.
        """
        if i < self.n_min or i >= self.n_max:
            raise OutOfRangeError(
                f"Index values must be in range: {self.n_min} <= i < {self.n_max}, but got {i}."
            )

    def __getitem__(self, i: int) -> int:
        """Return the value of slot ``i`` after checking its bounds."""
        self.verify_bounds(i)
        if self._elements is None:
            return int(i)
        return int(self._elements[i])

    def __iter__(self) -> Iterator[int]:
        for i in range(self.n_min, self.n_max):
            yield self[i]

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, (int, np.integer)):
            return False
        if self._elements is None:
            return self.n_min <= value < self.n_max
        return bool(np.any(np.asarray(self._elements[self.n_min:self.n_max]) == value))

    def random(self, rng: np.random.Generator) -> int:
        """
        Draw a uniformly distributed slot in ``[n_min, n_max)`` and return its value.

        Args:
            rng: Random generator owned by the caller.

        Raises:
            OutOfRangeError: If the range is empty.
        """
        if self.size == 0:
            raise OutOfRangeError(f"Cannot draw from the empty range [{self.n_min}, {self.n_max}).")
        return self[int(rng.integers(self.n_min, self.n_max))]

    def as_array(self) -> npt.NDArray[np.int64]:
        """Values of every slot, in slot order."""
        if self._elements is None:
            return np.arange(self.n_min, self.n_max, dtype=np.int64)
        return np.asarray(self._elements[self.n_min:self.n_max], dtype=np.int64)
