import os
from dotenv import load_dotenv

load_dotenv()

API_NAME = os.getenv("API_NAME", "Monthly Sales Forecast API")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("API_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# forecasts reach at most two years past the last known month
FORECAST_MAX_HORIZON_MONTHS = int(os.getenv("FORECAST_MAX_HORIZON_MONTHS", "24"))

SEASONAL_REFERENCE_YEAR = int(os.getenv("SEASONAL_REFERENCE_YEAR", "2023"))


def _parse_months(raw: str):
    months = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        year, month = item.split("-")
        months.append((int(year), int(month)))
    return tuple(months)


# known-anomalous months left out of min/max analysis, "YYYY-MM,YYYY-MM"
ANOMALOUS_MONTHS = _parse_months(os.getenv("ANOMALOUS_MONTHS", "2022-06,2024-06"))
