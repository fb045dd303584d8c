# backend/forecasting/engine.py
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence, Union

import numpy as np

from forecasting import methods
from forecasting.calendar_utils import is_after, walk
from forecasting.methods import MethodNotApplicable
from forecasting.series import SeriesPoint, annotate_changes, combine, has_price

logger = logging.getLogger(__name__)

MIN_HISTORY = 3


class MethodId(str, Enum):
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    EXPONENTIAL = "exponential"
    SEASONAL = "seasonal"
    MOVING_AVERAGE = "moving-average"
    WEIGHTED_MOVING_AVERAGE = "weighted-moving-average"
    EXPONENTIAL_SMOOTHING = "exponential-smoothing"
    HOLT_WINTERS = "holt-winters"
    ARIMA = "arima"

    @classmethod
    def parse(cls, value: Union[str, "MethodId"]) -> "MethodId":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown forecasting method '{value}'. Expected one of: {valid}")


METHODS: Dict[MethodId, Callable] = {
    MethodId.LINEAR: methods.linear,
    MethodId.POLYNOMIAL: methods.polynomial,
    MethodId.EXPONENTIAL: methods.exponential,
    MethodId.SEASONAL: methods.seasonal,
    MethodId.MOVING_AVERAGE: methods.moving_average,
    MethodId.WEIGHTED_MOVING_AVERAGE: methods.weighted_moving_average,
    MethodId.EXPONENTIAL_SMOOTHING: methods.exponential_smoothing,
    MethodId.HOLT_WINTERS: methods.holt_winters,
    MethodId.ARIMA: methods.arima,
}


@dataclass(frozen=True)
class Fallback:
    min_points: int
    use: MethodId


FALLBACKS: Dict[MethodId, Fallback] = {
    MethodId.HOLT_WINTERS: Fallback(methods.SEASON_LENGTH, MethodId.EXPONENTIAL_SMOOTHING),
    MethodId.ARIMA: Fallback(methods.AR_ORDER + 1, MethodId.LINEAR),
}


def resolve_method(method: MethodId, n_points: int) -> MethodId:
    """Follow fallback rules until a method accepts a history of `n_points`."""
    while method in FALLBACKS and n_points < FALLBACKS[method].min_points:
        fallback = FALLBACKS[method]
        logger.info(
            "%s needs %d points, got %d; falling back to %s",
            method.value, fallback.min_points, n_points, fallback.use.value,
        )
        method = fallback.use
    return method


def project(method: MethodId, values: Sequence[float], months: Sequence[int],
            horizon: Sequence[int]) -> List[float]:
    """Run one method on one metric and floor the result at zero."""
    raw = METHODS[method](np.asarray(values, dtype=float), list(months), list(horizon))
    raw = np.asarray(raw, dtype=float)
    if not np.all(np.isfinite(raw)):
        raise MethodNotApplicable(f"{method.value} produced non-finite values")
    return [max(0.0, float(v)) for v in raw]


def forecast(
    historical: Sequence[SeriesPoint],
    method: Union[str, MethodId],
    target_year: int,
    target_month: int,
) -> List[SeriesPoint]:
    """
    Predicted points from the month after the last historical point up to
    (target_year, target_month) inclusive. Empty when the history is too
    short, the target is not in the future, or the method does not apply.
    """
    method = MethodId.parse(method)

    if len(historical) < MIN_HISTORY:
        logger.info("Need at least %d historical points, got %d", MIN_HISTORY, len(historical))
        return []

    last = historical[-1]
    if not is_after(target_year, target_month, last.year, last.month):
        logger.info(
            "Target %d-%02d is not after last point %d-%02d, nothing to predict",
            target_year, target_month, last.year, last.month,
        )
        return []

    steps = list(walk(last.year, last.month, target_year, target_month))
    resolved = resolve_method(method, len(historical))

    fields = ["amount", "price"] if has_price(historical) else ["amount"]
    months = [p.month for p in historical]
    horizon = [m for _, m in steps]

    projected = {}
    try:
        for field in fields:
            values = [getattr(p, field) for p in historical]
            projected[field] = project(resolved, values, months, horizon)
    except MethodNotApplicable as e:
        logger.warning("Method %s not applicable: %s", resolved.value, e)
        return []

    predicted = [
        SeriesPoint(
            year=year,
            month=month,
            amount=projected["amount"][i],
            price=projected["price"][i] if "price" in projected else None,
            category=last.category,
            is_predicted=True,
        )
        for i, (year, month) in enumerate(steps)
    ]

    if "price" in projected:
        predicted = annotate_changes(predicted, previous=last)

    logger.info(
        "Generated %d predictions with %s through %d-%02d",
        len(predicted), resolved.value, target_year, target_month,
    )
    return predicted


def forecast_series(
    historical: Sequence[SeriesPoint],
    method: Union[str, MethodId],
    target_year: int,
    target_month: int,
) -> List[SeriesPoint]:
    """Historical points followed by the forecast."""
    return combine(historical, forecast(historical, method, target_year, target_month))
