"""
Arc-length basis management.

A basis is the strictly increasing set of arc-length positions a curve is
sampled at. Every interpolant of a curve references the same ``BasisSet``
instance, so inserting or cropping positions happens in exactly one place.
"""

from typing import Iterable, Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]


def densify(points: ArrayLike, min_count: int) -> np.ndarray:
    """
    Insert evenly spaced positions until at least ``min_count`` are present.

    The new positions are distributed across the gaps as evenly as possible;
    the first ``remainder`` gaps receive one extra position. Original values
    are kept exactly.

    Args:
        points: Increasing positions
        min_count: Requested number of positions

    Returns:
        np.ndarray: Array of length ``max(len(points), min_count)``

    Raises:
        ValueError: If fewer than 2 positions are given
    """
    points = np.asarray(points, dtype=float)
    original_size = len(points)

    if original_size < 2:
        raise ValueError(f"At least 2 positions are needed to densify, got {original_size}")

    if original_size >= min_count:
        return points.copy()

    points_to_add = min_count - original_size
    num_gaps = original_size - 1

    points_per_gap = np.full(num_gaps, points_to_add // num_gaps, dtype=int)
    points_per_gap[:points_to_add % num_gaps] += 1

    result = []
    for i in range(num_gaps):
        start, end = points[i], points[i + 1]
        result.append(start)

        step = (end - start) / (points_per_gap[i] + 1)
        result.extend(start + step * np.arange(1, points_per_gap[i] + 1))

    result.append(points[-1])

    return np.array(result, dtype=float)


def restrict(points: ArrayLike, start: float, end: float) -> np.ndarray:
    """
    Positions within ``[start, end]`` with both boundaries present.

    The boundaries are inserted only when not already present, so no
    duplicate is ever created. Positions outside the input span are simply
    not produced; the boundaries always are.

    Args:
        points: Increasing positions
        start: Lower boundary
        end: Upper boundary

    Returns:
        np.ndarray: Increasing array whose first element is ``start`` and last is ``end``

    Raises:
        ValueError: If start is not smaller than end
    """
    if not start < end:
        raise ValueError(f"Restriction range must be increasing, got [{start}, {end}]")

    points = np.asarray(points, dtype=float)
    inner = points[(points >= start) & (points <= end)]

    if inner.size == 0 or inner[0] != start:
        inner = np.concatenate(([start], inner))
    if inner[-1] != end:
        inner = np.concatenate((inner, [end]))

    return inner


def uniform(length: float, interval: float, overlap_threshold: float = 0.0) -> np.ndarray:
    """
    Evenly spaced positions over ``[0, length]`` ending exactly at ``length``.

    When the last regular position lies closer than ``overlap_threshold`` to
    the end it is moved onto the end rather than followed by a near-duplicate.

    Args:
        length: Span to cover
        interval: Spacing between positions
        overlap_threshold: Minimum distance kept between the last two positions

    Returns:
        np.ndarray: Increasing positions starting at 0

    Raises:
        ValueError: If length or interval is not positive
    """
    if length <= 0.0:
        raise ValueError(f"Length must be positive, got {length}")
    if interval <= 0.0:
        raise ValueError(f"Interval must be positive, got {interval}")

    count = int(np.ceil(length / interval))
    positions = list(interval * np.arange(count))
    positions = [s for s in positions if s < length]

    if len(positions) > 1 and length - positions[-1] < overlap_threshold:
        positions[-1] = length
    else:
        positions.append(length)

    return np.array(positions, dtype=float)


class BasisSet:
    """
    Shared, strictly increasing arc-length positions of a curve.

    Interpolants hold a reference to one instance; only the owning curve
    replaces its values, after which it refits every interpolant.
    """

    def __init__(self, values: ArrayLike):
        """
        Initialize a basis set.

        Args:
            values: Strictly increasing positions, at least 2

        Raises:
            ValueError: If the positions are too few, not finite or not strictly increasing
        """
        self._values = self._validate(values)

    @staticmethod
    def _validate(values: ArrayLike) -> np.ndarray:
        array = np.array(values, dtype=float)
        if array.ndim != 1 or array.size < 2:
            raise ValueError(f"A basis needs at least 2 positions, got shape {array.shape}")
        if not np.all(np.isfinite(array)):
            raise ValueError("Basis positions must be finite")
        if not np.all(np.diff(array) > 0.0):
            raise ValueError("Basis positions must be strictly increasing")
        array.setflags(write=False)
        return array

    def __len__(self) -> int:
        return self._values.size

    def __getitem__(self, index):
        return self._values[index]

    def __iter__(self):
        return iter(self._values)

    def __repr__(self) -> str:
        return f"BasisSet({len(self)} positions, span=[{self.start:.3f}, {self.end:.3f}])"

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the positions."""
        return self._values

    @property
    def start(self) -> float:
        return float(self._values[0])

    @property
    def end(self) -> float:
        return float(self._values[-1])

    @property
    def span(self) -> float:
        """Distance between the first and last position."""
        return self.end - self.start

    def contains(self, position: float) -> bool:
        """Tell whether ``position`` is exactly one of the positions."""
        index = int(np.searchsorted(self._values, position))
        return index < len(self) and self._values[index] == position

    def segment_index(self, position: float) -> int:
        """Index ``i`` of the segment ``[b[i], b[i+1]]`` holding ``position`` (clamped)."""
        index = int(np.searchsorted(self._values, position, side='right')) - 1
        return min(max(index, 0), len(self) - 2)

    def densify(self, min_count: int) -> np.ndarray:
        return densify(self._values, min_count)

    def restrict(self, start: float, end: float) -> np.ndarray:
        return restrict(self._values, start, end)

    def insert(self, positions: Iterable[float]) -> np.ndarray:
        """Positions merged with ``positions``, sorted and without exact duplicates."""
        return np.union1d(self._values, np.asarray(list(positions), dtype=float))

    def replace(self, values: ArrayLike) -> None:
        """
        Swap the positions in place.

        Only the owning curve calls this, immediately followed by a refit of
        every interpolant sharing the instance.
        """
        self._values = self._validate(values)

    def copy(self) -> 'BasisSet':
        return BasisSet(self._values)
