"""
Demonstration survey shipped with the tool.

15 rows x 3 columns of half-cell potentials (V vs CSE) taken on a column
face: x spacing 0.15 m, y spacing 0.10 m.
"""

DEFAULT_X = [0.0, 0.15, 0.30]

DEFAULT_Y = [1.94, 1.84, 1.74, 1.64, 1.54, 1.44, 1.34, 1.24, 1.14, 1.04, 0.94, 0.84, 0.74, 0.64, 0.54]

DEFAULT_MATRIX = [
    [-0.19, -0.17, -0.19],
    [-0.18, -0.22, -0.17],
    [-0.15, -0.21, -0.14],
    [-0.15, -0.23, -0.13],
    [-0.21, -0.24, -0.15],
    [-0.20, -0.20, -0.11],
    [-0.17, -0.25, -0.20],
    [-0.18, -0.21, -0.19],
    [-0.19, -0.22, -0.18],
    [-0.12, -0.17, -0.20],
    [-0.17, -0.20, -0.23],
    [-0.20, -0.14, -0.22],
    [-0.18, -0.20, -0.23],
    [-0.21, -0.20, -0.18],
    [-0.18, -0.21, -0.22],
]
