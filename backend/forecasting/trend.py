# backend/forecasting/trend.py
"""
Least-squares trend fits over the position index 0..n-1 (not calendar based).
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class LinearFit:
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class QuadraticFit:
    a: float
    b: float
    c: float

    def predict(self, x: float) -> float:
        return self.a + self.b * x + self.c * x * x


def fit_linear(values: Sequence[float]) -> LinearFit:
    y = np.asarray(values, dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)

    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        raise ValueError(f"Linear trend needs at least 2 points, got {n}")

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return LinearFit(float(slope), float(intercept))


def fit_quadratic(values: Sequence[float]) -> QuadraticFit:
    """
    Solve the normal equations of a + b*x + c*x^2 with Cramer's rule:

        | n    Sx   Sx2 | |a|   | Sy   |
        | Sx   Sx2  Sx3 | |b| = | Sxy  |
        | Sx2  Sx3  Sx4 | |c|   | Sx2y |
    """
    y = np.asarray(values, dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)

    s1, s2, s3, s4 = ((x ** p).sum() for p in (1, 2, 3, 4))
    normal = np.array([
        [n, s1, s2],
        [s1, s2, s3],
        [s2, s3, s4],
    ])
    rhs = np.array([y.sum(), (x * y).sum(), (x * x * y).sum()])

    # singular with fewer than 3 distinct positions
    if np.linalg.matrix_rank(normal) < 3:
        raise ValueError(f"Quadratic trend needs at least 3 points, got {n}")
    det = np.linalg.det(normal)

    coeffs = []
    for col in range(3):
        m = normal.copy()
        m[:, col] = rhs
        coeffs.append(float(np.linalg.det(m) / det))

    a, b, c = coeffs
    return QuadraticFit(a, b, c)
