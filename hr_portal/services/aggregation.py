"""
Reductions shared by every dashboard.

One defaulting rule everywhere: a missing/null number adds 0 to a sum and is
left out of rating averages, and a ratio over an empty denominator is 0
rather than an error.
"""
from collections import Counter
from typing import Any, Iterable, Mapping

Row = Mapping[str, Any]


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


def total(values: Iterable[Any]) -> float:
    return sum(_as_float(v) or 0.0 for v in values)


def total_of(rows: Iterable[Row], field: str) -> float:
    return total(row.get(field) for row in rows)


def count_by(rows: Iterable[Row], field: str) -> dict[str, int]:
    return dict(Counter(row.get(field) for row in rows if row.get(field) is not None))


def ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(numerator: float, denominator: float, digits: int = 1) -> float:
    return round(ratio(numerator, denominator) * 100, digits)


def percentage_label(numerator: float, denominator: float, digits: int = 1) -> str:
    """'87.5%'; '0%' when there is nothing to divide by."""
    if not denominator:
        return "0%"
    return f"{percentage(numerator, denominator, digits):.{digits}f}%"


def rated_values(rows: Iterable[Row], field: str) -> list[float]:
    return [_as_float(row[field]) for row in rows if row.get(field) is not None]


def average_rating(rows: Iterable[Row], field: str = "overall_rating", digits: int = 2) -> float:
    values = rated_values(rows, field)
    return round(ratio(sum(values), len(values)), digits)


def top_n(rows: Iterable[Row], field: str, n: int) -> list[Row]:
    """Highest `field` first; rows without a value are not ranked."""
    rated = [row for row in rows if row.get(field) is not None]
    return sorted(rated, key=lambda row: _as_float(row[field]), reverse=True)[:n]
