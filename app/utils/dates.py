from calendar import monthrange
from datetime import datetime


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift a datetime by whole calendar months, clamping the day to the
    target month's length (Jan 31 + 1 month -> Feb 28/29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
