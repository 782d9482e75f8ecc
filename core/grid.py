"""
Potential grid model for half-cell potential surveys.

A survey is a rectangular grid of half-cell potentials (V) measured over a
concrete surface:

    matrix[r][c] is the potential at (x_vals[c], y_vals[r])

- x_vals: column coordinates in meters, ascending
- y_vals: row coordinates in meters, descending (top of the element first)

The grid is an immutable value. Editing a cell or regenerating the axes
returns a new grid; the previous one is never mutated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from data import DEFAULT_MATRIX, DEFAULT_X, DEFAULT_Y

logger = logging.getLogger(__name__)


class GridShapeError(ValueError):
    """Raised when the matrix does not match the coordinate axes."""


class MalformedImportError(ValueError):
    """Raised when a survey file cannot be turned into a grid."""


@dataclass(frozen=True)
class PotentialGrid:
    """
    Rectangular half-cell potential survey.

    Attributes:
        x_vals: Column coordinates (m), ascending
        y_vals: Row coordinates (m), descending
        matrix: Rows of potentials (V); len(matrix) == len(y_vals) and every
            row has len(x_vals) values
    """
    x_vals: Tuple[float, ...]
    y_vals: Tuple[float, ...]
    matrix: Tuple[Tuple[float, ...], ...]

    def __post_init__(self):
        # Normalise whatever sequences were passed into tuples of floats
        x_vals = tuple(float(x) for x in self.x_vals)
        y_vals = tuple(float(y) for y in self.y_vals)
        matrix = tuple(tuple(float(v) for v in row) for row in self.matrix)

        for a, b in zip(x_vals, x_vals[1:]):
            if not a < b:
                raise GridShapeError(f"x coordinates must be strictly ascending: {a} then {b}")
        for a, b in zip(y_vals, y_vals[1:]):
            if not a > b:
                raise GridShapeError(f"y coordinates must be strictly descending: {a} then {b}")

        if len(matrix) != len(y_vals):
            raise GridShapeError(
                f"Grid has {len(matrix)} rows but {len(y_vals)} y coordinates"
            )
        for r, row in enumerate(matrix):
            if len(row) != len(x_vals):
                raise GridShapeError(
                    f"Row {r} has {len(row)} values but there are {len(x_vals)} x coordinates"
                )
            for c, v in enumerate(row):
                if not math.isfinite(v):
                    raise GridShapeError(f"Cell ({r}, {c}) is not a finite number: {v}")

        object.__setattr__(self, "x_vals", x_vals)
        object.__setattr__(self, "y_vals", y_vals)
        object.__setattr__(self, "matrix", matrix)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_lists(
        cls,
        x_vals: Sequence[float],
        y_vals: Sequence[float],
        matrix: Sequence[Sequence[float]],
    ) -> "PotentialGrid":
        return cls(tuple(x_vals), tuple(y_vals), tuple(tuple(row) for row in matrix))

    @classmethod
    def from_axes(cls, x_vals: Iterable[float], y_vals: Iterable[float]) -> "PotentialGrid":
        """
        Regenerate an empty survey over new axes.

        x values are sorted ascending, y values descending, and every cell
        starts at 0.0 V.

        Example:
            >>> grid = PotentialGrid.from_axes([0.3, 0.0, 0.15], [0.5, 1.0])
            >>> grid.x_vals, grid.y_vals
            ((0.0, 0.15, 0.3), (1.0, 0.5))
        """
        xs = sorted(float(x) for x in x_vals)
        ys = sorted((float(y) for y in y_vals), reverse=True)
        matrix = [[0.0] * len(xs) for _ in ys]
        logger.info(f"Regenerated survey grid: {len(ys)} rows x {len(xs)} columns")
        return cls.from_lists(xs, ys, matrix)

    def with_cell(self, row: int, col: int, value: float) -> "PotentialGrid":
        """Return a copy of the grid with one potential (V) replaced."""
        if not (0 <= row < self.n_rows and 0 <= col < self.n_cols):
            raise IndexError(
                f"Cell ({row}, {col}) outside {self.n_rows}x{self.n_cols} grid"
            )
        matrix: List[List[float]] = [list(r) for r in self.matrix]
        matrix[row][col] = float(value)
        return PotentialGrid.from_lists(self.x_vals, self.y_vals, matrix)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def n_rows(self) -> int:
        return len(self.y_vals)

    @property
    def n_cols(self) -> int:
        return len(self.x_vals)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.n_rows, self.n_cols)

    @property
    def size(self) -> int:
        return self.n_rows * self.n_cols

    @property
    def is_degenerate(self) -> bool:
        """True when fewer than 2 rows or 2 columns (no spacing can be derived)."""
        return self.n_rows < 2 or self.n_cols < 2

    def to_numpy(self) -> np.ndarray:
        """Potentials (V) as a float array of shape (n_rows, n_cols)."""
        return np.array(self.matrix, dtype=float).reshape(self.n_rows, self.n_cols)

    def to_dict(self) -> dict:
        return {
            "x_vals": list(self.x_vals),
            "y_vals": list(self.y_vals),
            "matrix": [list(row) for row in self.matrix],
        }


def default_survey() -> PotentialGrid:
    """The 15x3 demonstration survey loaded at start-up."""
    return PotentialGrid.from_lists(DEFAULT_X, DEFAULT_Y, DEFAULT_MATRIX)
