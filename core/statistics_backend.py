"""
Statistics Backend - ASTM C876 band classification

Classifies every cell of a potential survey into one of the three
ASTM C876 probability bands and computes global statistics.

Classification (thresholds converted to volts, grid stored in volts):
    v < severe_V              → severe    (>90% probability of corrosion)
    v > low_V                 → low       (>90% probability of no corrosion)
    severe_V <= v <= low_V    → uncertain (closed interval, both ends)

Statistics:
    mean, std, min, max computed on volts then scaled ×1000 (mV)
    std uses the population formula (divide by N, not N-1)
    an empty grid is treated as total = 1; mean/std are then 0
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from core.grid import PotentialGrid
from core.schemas import BandSummary, PotentialStatistics, UncertainPoint

logger = logging.getLogger(__name__)

MV_PER_V = 1000.0


def _band_masks(values: np.ndarray, severe_threshold_mV: float, low_threshold_mV: float):
    severe_V = severe_threshold_mV / MV_PER_V
    low_V = low_threshold_mV / MV_PER_V

    severe = values < severe_V
    low = values > low_V
    uncertain = (values >= severe_V) & (values <= low_V)
    return severe, uncertain, low


class StatisticsBackend:
    """
    Band classification and summary statistics for potential surveys.

    Stateless; every call is a pure function of its inputs.
    """

    def calculate_statistics(
        self,
        grid: PotentialGrid,
        severe_threshold_mV: float,
        low_threshold_mV: float,
    ) -> PotentialStatistics:
        """
        Classify every cell and compute global statistics.

        Args:
            grid: Potential survey (V)
            severe_threshold_mV: Upper bound of the severe band (exclusive)
            low_threshold_mV: Lower bound of the low-risk band (exclusive)

        Returns:
            PotentialStatistics with per-band counts/percentages and mV stats

        Example:
            >>> grid = PotentialGrid.from_lists([0], [0], [[-0.30]])
            >>> stats = StatisticsBackend().calculate_statistics(grid, -350, -200)
            >>> stats.uncertain.count, stats.mean_mV
            (1, -300.0)
        """
        flat = grid.to_numpy().ravel()
        severe, uncertain, low = _band_masks(flat, severe_threshold_mV, low_threshold_mV)

        n_severe = int(np.count_nonzero(severe))
        n_uncertain = int(np.count_nonzero(uncertain))
        n_low = int(np.count_nonzero(low))

        # Empty grid → total 1 so percentages stay defined
        total = flat.size or 1

        mean_V = float(np.sum(flat)) / total
        std_V = float(np.sqrt(np.sum((flat - mean_V) ** 2) / total))

        if flat.size:
            min_V = float(np.min(flat))
            max_V = float(np.max(flat))
        else:
            logger.warning("Statistics requested for an empty grid; min/max reported as 0")
            min_V = max_V = 0.0

        stats = PotentialStatistics(
            severe=BandSummary(count=n_severe, percentage=n_severe / total * 100.0),
            uncertain=BandSummary(count=n_uncertain, percentage=n_uncertain / total * 100.0),
            low=BandSummary(count=n_low, percentage=n_low / total * 100.0),
            mean_mV=mean_V * MV_PER_V,
            std_dev_mV=std_V * MV_PER_V,
            min_mV=min_V * MV_PER_V,
            max_mV=max_V * MV_PER_V,
            total=total,
        )

        logger.info(
            f"Classified {flat.size} cells: severe={n_severe}, uncertain={n_uncertain}, low={n_low} "
            f"(mean {stats.mean_mV:.0f} mV, std {stats.std_dev_mV:.0f} mV)"
        )
        return stats

    def get_uncertain_points(
        self,
        grid: PotentialGrid,
        severe_threshold_mV: float,
        low_threshold_mV: float,
    ) -> List[UncertainPoint]:
        """
        List the cells inside the uncertain band, in row-major scan order.

        Uses the same closed-interval test as calculate_statistics, so the
        list length always equals statistics.uncertain.count.
        """
        severe_V = severe_threshold_mV / MV_PER_V
        low_V = low_threshold_mV / MV_PER_V

        points = []
        for r, row in enumerate(grid.matrix):
            for c, v in enumerate(row):
                if severe_V <= v <= low_V:
                    points.append(UncertainPoint(
                        x=grid.x_vals[c],
                        y=grid.y_vals[r],
                        value_mV=v * MV_PER_V,
                    ))
        return points


def calculate_statistics(
    grid: PotentialGrid,
    severe_threshold_mV: float,
    low_threshold_mV: float,
) -> PotentialStatistics:
    return StatisticsBackend().calculate_statistics(grid, severe_threshold_mV, low_threshold_mV)


def get_uncertain_points(
    grid: PotentialGrid,
    severe_threshold_mV: float,
    low_threshold_mV: float,
) -> List[UncertainPoint]:
    return StatisticsBackend().get_uncertain_points(grid, severe_threshold_mV, low_threshold_mV)
