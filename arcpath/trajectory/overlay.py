"""
Field editing views.

``curve["velocity"]`` returns a ``RangeOverlay`` that reads the field and
writes it either entirely or over an arc-length range::

    curve["velocity"].range(2.0, 5.0).set(0.0)

Writes go through the curve so the shared basis stays consistent.
"""

from typing import Union

import numpy as np

from arcpath.trajectory.bases import ArrayLike


class RangeWriter:
    """Pending write of one field over ``[start, end]``."""

    def __init__(self, curve, name: str, start: float, end: float):
        self._curve = curve
        self._name = name
        self.start = start
        self.end = end

    def __repr__(self) -> str:
        return f"RangeWriter('{self._name}', [{self.start}, {self.end}])"

    def set(self, value: float) -> None:
        """
        Assign ``value`` to the field on the range.

        Raises:
            RangeError: If the range is empty, reversed or outside the curve
        """
        self._curve._assign_range(self._name, self.start, self.end, value)


class RangeOverlay:
    """
    View of a single scalar field of a curve.
    """

    def __init__(self, curve, name: str):
        self._curve = curve
        self._name = name

    def __repr__(self) -> str:
        return f"RangeOverlay('{self._name}')"

    @property
    def name(self) -> str:
        return self._name

    @property
    def values(self) -> np.ndarray:
        """Copy of the field samples at the curve bases."""
        return self._curve.interpolant(self._name).values

    def compute(self, s: Union[float, ArrayLike]):
        return self._curve.value(self._name, s)

    def __call__(self, s: Union[float, ArrayLike]):
        return self.compute(s)

    def set(self, value: float) -> None:
        """Assign ``value`` to the field along the whole curve."""
        self._curve._assign_field(self._name, value)

    def range(self, start: float, end: float) -> RangeWriter:
        """Writer for the field on ``[start, end]``; nothing changes until ``set``."""
        return RangeWriter(self._curve, self._name, start, end)
