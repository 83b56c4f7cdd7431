"""
Member dashboard figures: workout streak and BMI.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Union

from core.exceptions import ValidationError
from services.scheduling import parse_date


def compute_streak(booking_dates: Iterable[Union[str, date]], today: Optional[date] = None) -> int:
    """
    Consecutive days with a booking, counted backwards.

    Dates after today are ignored. The streak is alive only if today or
    yesterday has a booking; counting starts from the most recent of the two.
    """
    today = today or date.today()
    days = {parse_date(d) for d in booking_dates}
    days = {d for d in days if d <= today}

    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_bmi(weight_kg: float, height_cm: float) -> float:
    """BMI = kg / m^2, rounded to 2 decimals."""
    if weight_kg is None or height_cm is None:
        raise ValidationError("Weight and height are required")
    if weight_kg <= 0 or height_cm <= 0:
        raise ValidationError("Weight and height must be positive")
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 2)
