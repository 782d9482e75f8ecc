"""
CSV Data Loaders for Half-Cell Potential Reference Data

Reference-electrode thresholds are loaded from a version-controlled CSV
file instead of a hardcoded dictionary. Each row cites the clause of
ASTM C876-15 (or the conversion) it comes from.

CSV Files:
- astm_c876_electrodes.csv - Severe/low risk thresholds per reference electrode

Loaders are lazy (data loaded on first access) and cached.
"""

import csv
from pathlib import Path
from typing import Dict, Optional
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

# Location of CSV data files
DATA_DIR = Path(__file__).parent


@dataclass(frozen=True)
class ElectrodeReference:
    """
    Reference electrode and its ASTM C876 threshold pair.

    Source: astm_c876_electrodes.csv

    Potentials below severe_threshold_mV indicate >90% probability of
    active corrosion; potentials above low_threshold_mV indicate >90%
    probability of no corrosion.
    """
    name: str
    label: str
    severe_threshold_mV: float
    low_threshold_mV: float
    source: str = "ASTM C876-15"


# Cache for loaded data (lazy loading)
_ELECTRODES_CACHE: Optional[Dict[str, ElectrodeReference]] = None


def load_electrodes_from_csv() -> Dict[str, ElectrodeReference]:
    """
    Load reference electrode thresholds from CSV file.

    Returns:
        Dictionary mapping electrode name to ElectrodeReference, in file order

    Example:
        >>> electrodes = load_electrodes_from_csv()
        >>> electrodes["CSE"].severe_threshold_mV
        -350.0
    """
    global _ELECTRODES_CACHE

    if _ELECTRODES_CACHE is not None:
        return _ELECTRODES_CACHE

    csv_file = DATA_DIR / "astm_c876_electrodes.csv"

    if not csv_file.exists():
        raise FileNotFoundError(
            f"Electrode CSV not found: {csv_file}. "
            f"Expected file: astm_c876_electrodes.csv"
        )

    electrodes = {}

    with open(csv_file, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                ref = ElectrodeReference(
                    name=row['name'],
                    label=row['label'],
                    severe_threshold_mV=float(row['severe_threshold_mV']),
                    low_threshold_mV=float(row['low_threshold_mV']),
                    source=row['source'],
                )
            except (KeyError, ValueError) as e:
                logger.warning(f"Failed to parse electrode row: {row}. Error: {e}")
                continue

            if ref.severe_threshold_mV >= ref.low_threshold_mV:
                logger.warning(
                    f"Skipping electrode {ref.name}: severe threshold {ref.severe_threshold_mV} mV "
                    f"is not below low threshold {ref.low_threshold_mV} mV"
                )
                continue

            electrodes[ref.name] = ref

    logger.info(f"Loaded {len(electrodes)} reference electrodes from {csv_file}")

    _ELECTRODES_CACHE = electrodes
    return electrodes


def clear_caches():
    """Clear all cached CSV data (useful for testing or reloading)."""
    global _ELECTRODES_CACHE
    _ELECTRODES_CACHE = None
    logger.info("Cleared all CSV data caches")


__all__ = [
    "ElectrodeReference",
    "load_electrodes_from_csv",
    "clear_caches",
]
