"""
Survey CSV import/export.

File shape (one header row, then one row per y coordinate):

    Y/X;0,00;0,15;0,30
    1,94;-0,32;-0,28;-0,25
    1,84;-0,35;-0,30;-0,27

- Delimiter is ';' when the header contains one, otherwise ','
- Numbers use ',' as decimal separator on export; import accepts either
- Lines starting with '#' are comments
- Unparseable numbers import as 0.0 rather than failing the import

Import never mutates an existing grid; it returns a new PotentialGrid or
raises MalformedImportError.
"""

import logging
import re
from typing import List

from core.grid import GridShapeError, MalformedImportError, PotentialGrid

logger = logging.getLogger(__name__)

HEADER_CORNER = "Y/X"
EXPORT_DELIMITER = ";"
EXPORT_DECIMALS = 2

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_number(token: str) -> float:
    """
    Permissive number parsing.

    The first ',' is read as a decimal point, the longest numeric prefix is
    used, and anything without one parses as 0.0.

    Example:
        >>> parse_number("-0,35"), parse_number("1.5 V"), parse_number("n/a")
        (-0.35, 1.5, 0.0)
    """
    text = str(token).strip().replace(",", ".", 1)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


def _format_number(value: float) -> str:
    return f"{value:.{EXPORT_DECIMALS}f}".replace(".", ",")


def _order(values: List[float], descending: bool = False) -> List[int]:
    # Stable: equal coordinates keep file order
    return sorted(range(len(values)), key=lambda i: values[i], reverse=descending)


def import_grid_csv(text: str) -> PotentialGrid:
    """
    Parse survey CSV text into a new grid.

    The x axis is sorted ascending and the y axis descending; matrix rows
    and columns are reordered with their coordinates.

    Raises:
        MalformedImportError: fewer than 2 non-comment lines, no data rows,
            rows whose length does not match the header, or a coordinate
            that appears twice on its axis
    """
    lines = [
        line for line in text.strip().splitlines()
        if line.strip() and not line.startswith("#")
    ]
    if len(lines) < 2:
        raise MalformedImportError(
            f"Invalid CSV: expected a header and at least one data row, got {len(lines)} line(s)"
        )

    delimiter = ";" if ";" in lines[0] else ","
    x_vals = [parse_number(cell) for cell in lines[0].split(delimiter)[1:]]

    y_vals: List[float] = []
    rows: List[List[float]] = []
    for line_no, line in enumerate(lines[1:], start=2):
        cells = line.split(delimiter)
        if len(cells) <= 1:
            logger.warning(f"Skipping CSV line {line_no}: no values")
            continue
        y_vals.append(parse_number(cells[0]))
        rows.append([parse_number(cell) for cell in cells[1:]])

    if not rows:
        raise MalformedImportError("Invalid CSV: no data rows")

    for r, row in enumerate(rows):
        if len(row) != len(x_vals):
            raise MalformedImportError(
                f"Invalid CSV: row for y={y_vals[r]} has {len(row)} values, "
                f"header has {len(x_vals)} x coordinates"
            )

    for axis, values in (("x", x_vals), ("y", y_vals)):
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            raise MalformedImportError(f"Invalid CSV: duplicate {axis} coordinates {duplicates}")

    col_order = _order(x_vals)
    row_order = _order(y_vals, descending=True)

    try:
        grid = PotentialGrid.from_lists(
            [x_vals[c] for c in col_order],
            [y_vals[r] for r in row_order],
            [[rows[r][c] for c in col_order] for r in row_order],
        )
    except GridShapeError as e:
        raise MalformedImportError(f"Invalid CSV: {e}") from e

    logger.info(f"Imported survey CSV: {grid.n_rows} rows x {grid.n_cols} columns")
    return grid


def export_grid_csv(grid: PotentialGrid) -> str:
    """Inverse of import_grid_csv: ';'-delimited, two decimals, ',' decimal separator."""
    lines = [EXPORT_DELIMITER.join([HEADER_CORNER] + [_format_number(x) for x in grid.x_vals])]
    for y, row in zip(grid.y_vals, grid.matrix):
        lines.append(EXPORT_DELIMITER.join([_format_number(y)] + [_format_number(v) for v in row]))
    return "\n".join(lines) + "\n"
