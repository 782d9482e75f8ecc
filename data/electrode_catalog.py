"""
Reference electrode catalog (ASTM C876).

Thin lookup layer over the CSV loader. Selecting an electrode selects its
threshold pair; the same survey read against a different electrode is
classified with different cut-offs.
"""

from typing import List

from .csv_loaders import ElectrodeReference, load_electrodes_from_csv

DEFAULT_ELECTRODE = "CSE"


def list_electrodes() -> List[ElectrodeReference]:
    """All catalog entries, in file order."""
    return list(load_electrodes_from_csv().values())


def supported_electrodes() -> List[str]:
    return list(load_electrodes_from_csv().keys())


def get_electrode(name: str) -> ElectrodeReference:
    """
    Look up a reference electrode by name.

    Raises:
        ValueError: If the electrode is not in the catalog
    """
    electrodes = load_electrodes_from_csv()
    if name not in electrodes:
        raise ValueError(
            f"Electrode '{name}' not supported. Options: {list(electrodes.keys())}"
        )
    return electrodes[name]
