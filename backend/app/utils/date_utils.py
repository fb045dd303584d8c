def parse_period(period: str):
    """
    'YYYY-MM' -> (year, month)
    """
    year, month = map(int, period.split("-"))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period '{period}'")
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"
