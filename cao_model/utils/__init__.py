from .date_utils import humanize_span, months_between, to_date
from .decimal_helpers import percent_change, round2, to_money

__all__ = [
    "humanize_span",
    "months_between",
    "to_date",
    "percent_change",
    "round2",
    "to_money",
]
