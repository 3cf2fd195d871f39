"""
Conversion of decision details and audit metadata into JSON-safe values.

Rejection details carry raw figures (distances, accuracies, timestamps read
back from the store), so the conversion has to cope with naive datetimes,
enums and non-finite floats coming from malformed input.
"""
import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from presence.utils.datetime_utils import ensure_utc


def sanitize_for_json(value: Any) -> Any:
    """
    Recursively convert a value for JSON columns (audit_logs.meta_json) and
    JSON response bodies.

    - datetimes become ISO-8601 in UTC (naive values are taken as UTC)
    - NaN and infinities become None, since JSON has no representation for them
    - enums become their value, models their dumped fields
    """
    if value is None or isinstance(value, bool):
        return value
    # Enum before str/int: str-valued enums are also str instances
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (str, int)):
        return value
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return sanitize_for_json(float(value))
    if isinstance(value, dict):
        return {str(k): sanitize_for_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_json(item) for item in value]
    if isinstance(value, BaseModel):
        return sanitize_for_json(value.model_dump())
    return str(value)
