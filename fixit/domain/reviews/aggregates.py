"""Rating arithmetic shared by reviews and dashboards"""

from decimal import ROUND_HALF_UP, Decimal

TENTH = Decimal("0.1")


def average_rating(ratings) -> float:
    """
    Arithmetic mean rounded half-up to one decimal, 0.0 when there are none.
    [5, 4, 5] -> 4.7
    """
    ratings = list(ratings)
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(TENTH, rounding=ROUND_HALF_UP))
