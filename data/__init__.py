"""
Reference Data Module

Contains:
- ASTM C876-15 reference electrode thresholds (CSV-backed)
- Demonstration survey used as the initial grid
"""

from .csv_loaders import (
    ElectrodeReference,
    load_electrodes_from_csv,
    clear_caches,
)
from .electrode_catalog import (
    DEFAULT_ELECTRODE,
    list_electrodes,
    supported_electrodes,
    get_electrode,
)
from .default_survey import DEFAULT_X, DEFAULT_Y, DEFAULT_MATRIX

__all__ = [
    "ElectrodeReference",
    "load_electrodes_from_csv",
    "clear_caches",
    "DEFAULT_ELECTRODE",
    "list_electrodes",
    "supported_electrodes",
    "get_electrode",
    "DEFAULT_X",
    "DEFAULT_Y",
    "DEFAULT_MATRIX",
]
