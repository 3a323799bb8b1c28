from .timezone import (
    CivilTime,
    civil_to_instant,
    instant_to_civil,
    day_of_week,
    local_day_bounds,
    parse_date,
    parse_instant,
    format_instant,
)

__all__ = [
    "CivilTime",
    "civil_to_instant",
    "instant_to_civil",
    "day_of_week",
    "local_day_bounds",
    "parse_date",
    "parse_instant",
    "format_instant",
]
