from __future__ import annotations

import math

import numpy as np


class Histogram:
    """
    Fixed-range 1D accumulator over ``[x_low, x_high)`` with ``n_bins`` equal bins.

    Fills outside the range are dropped. Fill values must be finite.
    """

    def __init__(self, n_bins: int, x_low: float, x_high: float):
        if n_bins <= 0:
            raise ValueError(f"Histogram needs at least one bin, got {n_bins}")
        if not (math.isfinite(x_low) and math.isfinite(x_high)):
            raise ValueError(f"Histogram range must be finite, got [{x_low}, {x_high})")
        if x_low >= x_high:
            raise ValueError(f"Histogram range is empty: [{x_low}, {x_high})")
        self._n_bins = int(n_bins)
        self._x_low = float(x_low)
        self._x_high = float(x_high)
        self._bin_width = (self._x_high - self._x_low) / self._n_bins
        self._contents = np.zeros(self._n_bins, dtype="float64")

    @property
    def n_bins(self) -> int:
        return self._n_bins

    @property
    def x_low(self) -> float:
        return self._x_low

    @property
    def x_high(self) -> float:
        return self._x_high

    @property
    def bin_width(self) -> float:
        return self._bin_width

    def bin_index(self, value: float) -> int:
        """Bin holding ``value``, or -1 when outside the range."""
        if not math.isfinite(value):
            raise ValueError(f"Histogram fill value must be finite, got {value}")
        if value < self._x_low or value >= self._x_high:
            return -1
        # guard against rounding pushing the last value onto n_bins
        return min(int((value - self._x_low) / self._bin_width), self._n_bins - 1)

    def fill(self, value: float, weight: float = 1.0) -> None:
        idx = self.bin_index(value)
        if idx < 0:
            return
        self._contents[idx] += weight

    def bin_content(self, i: int) -> float:
        if i < 0 or i >= self._n_bins:
            raise IndexError(f"Bin {i} out of range [0, {self._n_bins})")
        return float(self._contents[i])

    def contents(self) -> np.ndarray:
        """Copy of all bin contents."""
        return self._contents.copy()

    def total(self) -> float:
        return float(self._contents.sum())

    def __repr__(self) -> str:
        return f"Histogram(n_bins={self._n_bins}, x_low={self._x_low:.4g}, x_high={self._x_high:.4g})"
