"""
Gradient Backend - Spatial potential gradients

Sharp local changes of potential indicate corrosion macrocells (separated
anodic and cathodic regions). For every interior cell (r, c) with
r < rows-1 and c < cols-1:

    grad_x = |V[r][c+1] - V[r][c]| / dx
    grad_y = |V[r+1][c] - V[r][c]| / dy
    gradient = max(grad_x, grad_y) × 1000      [mV/m]

dx = |x[1] - x[0]|, dy = |y[1] - y[0]| (uniform spacing assumed). When an
axis has fewer than 2 coordinates the spacing falls back to 1 m; such a
grid has no interior cells, so the result is empty. That condition is
exposed as GradientSummary.degenerate_axis rather than raised.

Interpretation (ASTM C876-15, Annex X1):
    > 150 mV/m: active macrocell formation
    > 100 mV/m: critical, possible localized corrosion activity
    > 50 mV/m:  attention
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from core.grid import PotentialGrid
from core.schemas import GradientMatrix, GradientPoint, GradientSummary

logger = logging.getLogger(__name__)

MV_PER_V = 1000.0

# Gradient classification thresholds (mV/m)
CRITICAL_GRADIENT_MV_M = 100.0
ATTENTION_GRADIENT_MV_M = 50.0
MACROCELL_GRADIENT_MV_M = 150.0


def _axis_spacing(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 1.0
    return abs(values[1] - values[0])


def classify_gradient(gradient_mV_m: float) -> str:
    """Status label of a gradient: "critical", "attention" or "normal"."""
    if gradient_mV_m > CRITICAL_GRADIENT_MV_M:
        return "critical"
    elif gradient_mV_m > ATTENTION_GRADIENT_MV_M:
        return "attention"
    return "normal"


class GradientBackend:
    """
    Discrete gradient field over a potential survey.

    Produces the same per-cell values in two layouts: a sparse point list
    (one record per interior cell) and a dense matrix aligned to the
    truncated axes.
    """

    def spacing(self, grid: PotentialGrid) -> Tuple[float, float]:
        """(dx, dy) in meters, with the 1 m fallback for degenerate axes."""
        return _axis_spacing(grid.x_vals), _axis_spacing(grid.y_vals)

    def gradient_field(self, grid: PotentialGrid) -> np.ndarray:
        """
        Gradient (mV/m) of every interior cell, shape (rows-1, cols-1).

        Returns an empty (0, 0) array for a grid with fewer than 2 rows or
        columns.
        """
        if grid.is_degenerate:
            logger.warning(
                f"Grid {grid.n_rows}x{grid.n_cols} has a degenerate axis; no gradients computed"
            )
            return np.zeros((0, 0))

        dx, dy = self.spacing(grid)
        v = grid.to_numpy()
        corner = v[:-1, :-1]
        grad_x = np.abs(v[:-1, 1:] - corner) / dx
        grad_y = np.abs(v[1:, :-1] - corner) / dy
        return np.maximum(grad_x, grad_y) * MV_PER_V

    def calculate_gradients(self, grid: PotentialGrid) -> List[GradientPoint]:
        """
        Sparse gradient list in row-major order.

        Each gradient is anchored at (x_vals[c], y_vals[r]). For an R×C grid
        (R, C >= 2) the list has (R-1)×(C-1) points.

        Example:
            >>> grid = PotentialGrid.from_lists([0, 1], [1, 0], [[-0.40, -0.10], [-0.05, -0.02]])
            >>> GradientBackend().calculate_gradients(grid)[0].gradient_mV_m
            350.0...
        """
        field = self.gradient_field(grid)
        points = []
        for r in range(field.shape[0]):
            for c in range(field.shape[1]):
                points.append(GradientPoint(
                    x=grid.x_vals[c],
                    y=grid.y_vals[r],
                    gradient_mV_m=float(field[r, c]),
                ))
        return points

    def calculate_gradient_matrix(self, grid: PotentialGrid) -> GradientMatrix:
        """Dense gradient field over x_vals[:-1], y_vals[:-1] for surface/contour charts."""
        field = self.gradient_field(grid)
        if field.size == 0:
            return GradientMatrix(x_vals=[], y_vals=[], matrix=[])

        return GradientMatrix(
            x_vals=list(grid.x_vals[:-1]),
            y_vals=list(grid.y_vals[:-1]),
            matrix=field.tolist(),
        )

    def summarize(self, gradients: List[GradientPoint], degenerate_axis: bool = False) -> GradientSummary:
        """Max, mean and critical count (> 100 mV/m) of a gradient list."""
        values = np.array([g.gradient_mV_m for g in gradients], dtype=float)
        if values.size == 0:
            return GradientSummary(
                max_gradient_mV_m=0.0,
                mean_gradient_mV_m=0.0,
                critical_count=0,
                point_count=0,
                degenerate_axis=degenerate_axis,
            )

        return GradientSummary(
            max_gradient_mV_m=float(values.max()),
            mean_gradient_mV_m=float(values.mean()),
            critical_count=int(np.count_nonzero(values > CRITICAL_GRADIENT_MV_M)),
            point_count=int(values.size),
            degenerate_axis=degenerate_axis,
        )


def calculate_gradients(grid: PotentialGrid) -> List[GradientPoint]:
    return GradientBackend().calculate_gradients(grid)


def calculate_gradient_matrix(grid: PotentialGrid) -> GradientMatrix:
    return GradientBackend().calculate_gradient_matrix(grid)


def summarize_gradients(gradients: List[GradientPoint], degenerate_axis: bool = False) -> GradientSummary:
    return GradientBackend().summarize(gradients, degenerate_axis=degenerate_axis)
