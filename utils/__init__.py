"""
Format helpers for half-cell potential surveys.

- grid_csv: survey CSV import/export (';' delimited, ',' decimals)
- json_writer: reference DocumentWriter producing JSON bytes
"""
