# backend/forecasting/methods.py
"""
Forecasting method library.

Every method projects ONE metric (amount or price) and shares the signature

    method(values, months, horizon) -> list of raw projected values

- values:  historical values of the metric, oldest first
- months:  calendar month (1..12) of each historical value
- horizon: calendar month of each step to project, in walk order; step k
           (1-based) is `k` months ahead of the last historical point

Flooring at zero and the non-finite check happen in the dispatcher.
Methods raise MethodNotApplicable when the data makes their arithmetic
meaningless (zero or negative denominators).
"""

import logging
from typing import List, Sequence

import numpy as np

from forecasting.trend import fit_linear, fit_quadratic

logger = logging.getLogger(__name__)

MOVING_AVERAGE_WINDOW = 6

# Holt / Holt-Winters smoothing factors
ALPHA = 0.3
BETA = 0.1
GAMMA = 0.2
SEASON_LENGTH = 12

AR_ORDER = 3


class MethodNotApplicable(ValueError):
    """The history does not allow this method (e.g. division by a zero value)."""


def _steps(horizon: Sequence[int]) -> range:
    return range(1, len(horizon) + 1)


def linear(values, months, horizon) -> List[float]:
    fit = fit_linear(values)
    n = len(values)
    return [fit.predict(n - 1 + k) for k in _steps(horizon)]


def polynomial(values, months, horizon) -> List[float]:
    fit = fit_quadratic(values)
    n = len(values)
    return [fit.predict(n - 1 + k) for k in _steps(horizon)]


def exponential(values, months, horizon) -> List[float]:
    n = len(values)
    first, last = float(values[0]), float(values[-1])
    if first <= 0 or last < 0:
        raise MethodNotApplicable(
            f"exponential growth needs a positive first value and non-negative last value "
            f"(first={first}, last={last})"
        )

    ratio = (last / first) ** (1.0 / n)
    logger.debug("Exponential growth ratio: %.4f", ratio)
    return [last * ratio ** k for k in _steps(horizon)]


def seasonal(values, months, horizon) -> List[float]:
    """Calendar-month averages scaled by the overall linear growth rate."""
    by_month = {m: [] for m in range(1, 13)}
    for value, month in zip(values, months):
        by_month[month].append(float(value))

    overall = float(np.mean(values))
    if overall == 0:
        raise MethodNotApplicable("seasonal growth rate needs a non-zero overall mean")

    slope = fit_linear(values).slope
    growth_pct = slope / overall * 100

    logger.debug(
        "Seasonal prediction: monthly growth %.2f%%, overall mean %.0f, observed months %s",
        growth_pct, overall, sorted(m for m, v in by_month.items() if v),
    )

    predictions = []
    for k, month in zip(_steps(horizon), horizon):
        observed = by_month[month]
        baseline = float(np.mean(observed)) if observed else overall
        predictions.append(baseline * (1 + growth_pct / 100) ** k)
    return predictions


def _window(values):
    size = min(MOVING_AVERAGE_WINDOW, len(values))
    return np.asarray(values[-size:], dtype=float)


def moving_average(values, months, horizon) -> List[float]:
    window = _window(values)
    slope = fit_linear(window).slope
    base = float(window.mean())
    return [base + slope * k for k in _steps(horizon)]


def weighted_moving_average(values, months, horizon) -> List[float]:
    window = _window(values)
    slope = fit_linear(window).slope
    weights = np.arange(1, len(window) + 1, dtype=float)  # newest weighs most
    base = float(np.average(window, weights=weights))
    return [base + slope * k for k in _steps(horizon)]


def exponential_smoothing(values, months, horizon, alpha=ALPHA, beta=BETA) -> List[float]:
    """Holt's double exponential smoothing; the trend is held flat over the horizon."""
    level = float(values[0])
    trend = float(values[1]) - float(values[0]) if len(values) > 1 else 0.0

    for value in values[1:]:
        prev_level = level
        level = alpha * value + (1 - alpha) * (level + trend)
        trend = beta * (level - prev_level) + (1 - beta) * trend

    return [level + k * trend for k in _steps(horizon)]


def holt_winters(values, months, horizon,
                 alpha=ALPHA, beta=BETA, gamma=GAMMA, period=SEASON_LENGTH) -> List[float]:
    """
    Triple exponential smoothing with per-position seasonal ratios.
    Needs at least one full season of history.
    """
    n = len(values)
    if n < period:
        raise MethodNotApplicable(f"holt-winters needs {period} points, got {n}")

    overall = float(np.mean(values))
    if overall == 0:
        raise MethodNotApplicable("holt-winters needs a non-zero overall mean")

    season = [float(v) / overall for v in values[:period]]
    if season[0] == 0:
        raise MethodNotApplicable("holt-winters needs a non-zero first value")

    level = float(values[0]) / season[0]
    trend = 0.0

    for i in range(1, n):
        ratio = season[i % period]
        if ratio == 0:
            raise MethodNotApplicable(f"zero seasonal ratio at position {i % period}")
        prev_level = level
        level = alpha * (values[i] / ratio) + (1 - alpha) * (level + trend)
        trend = beta * (level - prev_level) + (1 - beta) * trend
        if level == 0:
            raise MethodNotApplicable("holt-winters level collapsed to zero")
        season[i % period] = gamma * (values[i] / level) + (1 - gamma) * ratio

    return [(level + k * trend) * season[(n - 1 + k) % period] for k in _steps(horizon)]


def arima(values, months, horizon, order=AR_ORDER) -> List[float]:
    """
    Simplified AR(p): each lag coefficient is the mean ratio of the lagged
    value to the value it precedes, normalized so the coefficients sum to 1.
    Forecasts roll forward, feeding each prediction back into the window.
    """
    n = len(values)
    if n <= order:
        raise MethodNotApplicable(f"AR({order}) needs {order + 1} points, got {n}")

    targets = [float(v) for v in values[order:]]
    if any(v == 0 for v in targets):
        raise MethodNotApplicable("AR coefficients need non-zero historical values")

    coefs = []
    for lag in range(1, order + 1):
        ratios = [values[t - lag] / values[t] for t in range(order, n)]
        coefs.append(float(np.mean(ratios)))

    total = sum(coefs)
    if total == 0:
        raise MethodNotApplicable("AR coefficients sum to zero")
    coefs = [c / total for c in coefs]
    logger.debug("AR(%d) coefficients: %s", order, [round(c, 4) for c in coefs])

    window = [float(v) for v in values[-order:]]
    predictions = []
    for _ in _steps(horizon):
        pred = sum(coefs[lag - 1] * window[-lag] for lag in range(1, order + 1))
        pred = max(0.0, pred)
        predictions.append(pred)
        window = window[1:] + [pred]
    return predictions
