import html
import math
from typing import Any, Optional


def safe_div(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def coerce_int(value: Any) -> int:
    """Upstream numeric fields may be missing, null or junk; all of those count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def format_number(value: Optional[int]) -> str:
    return f"{coerce_int(value):,}"


def xml_escape(text: Any) -> str:
    return html.escape(str(text), quote=True)
