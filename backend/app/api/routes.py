from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from app.core.config import (
    ANOMALOUS_MONTHS,
    FORECAST_MAX_HORIZON_MONTHS,
    SEASONAL_REFERENCE_YEAR,
)
from app.schemas.forecast import (
    AggregateRequest,
    AggregateResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    BacktestRequest,
    BacktestResponse,
    BacktestScoreOut,
    ForecastRequest,
    ForecastResponse,
    SeriesPointOut,
)
from app.utils.date_utils import format_period, parse_period


from forecasting.aggregate import aggregate, categories
from forecasting.analytics import analyze, window
from forecasting.backtest import backtest
from forecasting.calendar_utils import month_label, months_between, prediction_years
from forecasting.engine import MIN_HISTORY, MethodId, forecast, resolve_method
from forecasting.series import MonthlyRecord, SeriesPoint, combine, with_changes


router = APIRouter()


def _to_points(history):
    return with_changes([SeriesPoint(**h.model_dump()) for h in history])


def _to_out(points):
    return [
        SeriesPointOut(
            **asdict(p),
            period=format_period(p.year, p.month),
            label=month_label(p.year, p.month),
        )
        for p in points
    ]


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/methods")
def list_methods():
    return {"methods": [m.value for m in MethodId]}


@router.post("/aggregate", response_model=AggregateResponse)
def aggregate_records(req: AggregateRequest):
    """
    Group raw records into one point per month.
    The chronologically first and last records are always dropped.
    """
    records = [MonthlyRecord(**r.model_dump()) for r in req.records]
    series = aggregate(records, req.category)

    note = None
    if len(series) < MIN_HISTORY:
        note = f"Only {len(series)} complete months; at least {MIN_HISTORY} are needed to forecast."

    return AggregateResponse(
        series=_to_out(series),
        categories=categories(records),
        note=note,
    )


@router.post("/forecast", response_model=ForecastResponse)
def forecast_history(req: ForecastRequest):
    """
    Project the history month by month up to the target period.
    """
    history = _to_points(req.history)

    try:
        target_year, target_month = parse_period(req.target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if history:
        last = history[-1]
        horizon = months_between(last.year, last.month, target_year, target_month)
        if horizon > FORECAST_MAX_HORIZON_MONTHS:
            raise HTTPException(
                status_code=400,
                detail=f"Target is {horizon} months ahead; the limit is {FORECAST_MAX_HORIZON_MONTHS}."
            )

    try:
        predicted = forecast(history, req.method, target_year, target_month)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Forecast error: {str(e)}"
        )

    note = None
    if len(history) < MIN_HISTORY:
        note = f"At least {MIN_HISTORY} months of historical data required for prediction."
    elif not predicted and months_between(history[-1].year, history[-1].month, target_year, target_month) <= 0:
        note = "Target month is not after the last historical month."
    elif not predicted:
        note = f"Method '{req.method.value}' is not applicable to this history."

    return ForecastResponse(
        method=req.method,
        resolved_method=resolve_method(req.method, len(history)),
        forecast=_to_out(predicted),
        series=_to_out(combine(history, predicted)),
        prediction_years=prediction_years(history),
        note=note,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze_series(req: AnalyzeRequest):
    """
    Seasonal peaks, min/max and price/sales correlation over a window of the
    combined series.
    """
    points = _to_points(req.series)
    windowed = window(points, req.window_start, req.window_end)
    result = analyze(
        windowed,
        reference_year=SEASONAL_REFERENCE_YEAR,
        excluded=ANOMALOUS_MONTHS,
    )
    return AnalyzeResponse.model_validate(result)


@router.post("/backtest", response_model=BacktestResponse)
def backtest_history(req: BacktestRequest):
    history = _to_points(req.history)
    scores = backtest(history, holdout=req.holdout, methods=req.methods)

    note = None
    if not scores:
        note = f"Need at least {MIN_HISTORY + req.holdout} months to hold out {req.holdout}."

    return BacktestResponse(
        scores=[BacktestScoreOut.model_validate(s) for s in scores],
        note=note,
    )
