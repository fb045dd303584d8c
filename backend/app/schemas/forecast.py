from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Optional

from forecasting.engine import MethodId


class MonthlyRecordIn(BaseModel):
    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    category: str = Field("Uncategorized", min_length=1)
    amount: float
    price: Optional[float] = Field(None, ge=0)


class SeriesPointIn(BaseModel):
    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    amount: float
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    is_predicted: bool = False
    price_change: Optional[float] = None
    sales_change: Optional[float] = None
    price_change_percent: Optional[float] = None
    sales_change_percent: Optional[float] = None


def _check_increasing(points, field):
    periods = [(p.year, p.month) for p in points]
    for prev, cur in zip(periods, periods[1:]):
        if cur <= prev:
            raise ValueError(
                f"{field} must be in strictly increasing month order; "
                f"{cur[0]}-{cur[1]:02d} follows {prev[0]}-{prev[1]:02d}"
            )


class SeriesPointOut(SeriesPointIn):
    period: str = Field(..., description="YYYY-MM")
    label: str = Field(..., description="e.g. Jan 2023")


class AggregateRequest(BaseModel):
    records: List[MonthlyRecordIn]
    category: str = "Total"


class AggregateResponse(BaseModel):
    series: List[SeriesPointOut]
    categories: List[str]
    note: str | None = None


class ForecastRequest(BaseModel):
    history: List[SeriesPointIn]
    method: MethodId = MethodId.SEASONAL
    target: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")

    @model_validator(mode="after")
    def history_in_order(self):
        _check_increasing(self.history, "history")
        return self


class ForecastResponse(BaseModel):
    method: MethodId
    resolved_method: MethodId
    forecast: List[SeriesPointOut]
    series: List[SeriesPointOut]
    prediction_years: List[int]
    note: str | None = None


class AnalyzeRequest(BaseModel):
    series: List[SeriesPointIn]
    window_start: int = Field(0, ge=0)
    window_end: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def series_in_order(self):
        _check_increasing(self.series, "series")
        return self


class SeasonalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    totals: Dict[str, float]
    peak: Optional[str] = None
    low: Optional[str] = None
    message: str


class ExtremePointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    amount: float
    label: str


class ExtremesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    max: Optional[ExtremePointOut] = None
    min: Optional[ExtremePointOut] = None
    message: str


class CorrelationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    inverse_cases: int
    direct_cases: int
    total_cases: int
    inverse_percent: Optional[float] = None
    message: str


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    seasonal: SeasonalOut
    extremes: ExtremesOut
    correlation: Optional[CorrelationOut] = None
    date_range: str
    predicted_count: int


class BacktestRequest(BaseModel):
    history: List[SeriesPointIn]
    holdout: int = Field(3, ge=1, le=12)
    methods: Optional[List[MethodId]] = None

    @model_validator(mode="after")
    def history_in_order(self):
        _check_increasing(self.history, "history")
        return self


class BacktestScoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    method: MethodId
    rmse: Optional[float] = None
    mae: Optional[float] = None
    predictions: List[float]
    actuals: List[float]


class BacktestResponse(BaseModel):
    scores: List[BacktestScoreOut]
    note: str | None = None
