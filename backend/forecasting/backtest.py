# backend/forecasting/backtest.py
"""
Hold-out evaluation of the forecasting methods.

The last `holdout` historical months are hidden, each method forecasts them
from the remaining history, and the predictions are scored against the
actual amounts. Methods that return no forecast are kept in the results with
no score so callers can tell "not applicable" from "bad".
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from forecasting.engine import MIN_HISTORY, MethodId, forecast
from forecasting.series import SeriesPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestScore:
    method: MethodId
    rmse: Optional[float]
    mae: Optional[float]
    predictions: List[float]
    actuals: List[float]


def backtest(
    historical: Sequence[SeriesPoint],
    holdout: int = 3,
    methods: Optional[Iterable] = None,
) -> List[BacktestScore]:
    if holdout < 1:
        raise ValueError(f"holdout must be >= 1, got {holdout}")

    if len(historical) - holdout < MIN_HISTORY:
        logger.info(
            "Backtest needs %d training points, only %d left after holding out %d",
            MIN_HISTORY, len(historical) - holdout, holdout,
        )
        return []

    train = list(historical[:-holdout])
    val = list(historical[-holdout:])
    actuals = [p.amount for p in val]
    target = val[-1]

    chosen = list(MethodId) if methods is None else [MethodId.parse(m) for m in methods]

    scores = []
    for method in chosen:
        predicted = forecast(train, method, target.year, target.month)
        if not predicted:
            scores.append(BacktestScore(method, None, None, [], actuals))
            continue

        # the walk covers every calendar month, so gaps in the history line up by period
        by_period = {p.period: p.amount for p in predicted}
        preds = [by_period[p.period] for p in val]
        mse = mean_squared_error(actuals, preds)
        mae = mean_absolute_error(actuals, preds)
        scores.append(BacktestScore(method, float(np.sqrt(mse)), float(mae), preds, actuals))
        logger.debug("Backtest %s: rmse=%.4f mae=%.4f", method.value, np.sqrt(mse), mae)

    # scored methods first, best rmse first
    scores.sort(key=lambda s: (s.rmse is None, s.rmse if s.rmse is not None else 0.0))
    return scores
