from __future__ import annotations

import re
from datetime import date, datetime

from sedation_chart.domain.models.iv_sedation import SedationFieldRegistry

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

BMI_NOT_CALCULATED = "Not calculated"


def parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def calculate_bmi(height_feet: object, height_inches: object, weight_lb: object) -> float | None:
    feet = parse_int(height_feet)
    inches = parse_int(height_inches)
    weight = parse_float(weight_lb)
    if feet is None or weight is None or weight <= 0:
        return None
    total_inches = feet * 12 + (inches or 0)
    if total_inches <= 0:
        return None
    return round(weight / (total_inches * total_inches) * 703, 2)


def bmi_category(bmi: float | None) -> str:
    if bmi is None:
        return BMI_NOT_CALCULATED
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def is_obese(bmi: float | None) -> bool:
    return bmi is not None and bmi >= 30


def registry_bmi(registry: SedationFieldRegistry) -> float | None:
    return calculate_bmi(registry.height_feet, registry.height_inches, registry.weight)


def is_valid_time(value: object) -> bool:
    return bool(_TIME_RE.match(str(value or "").strip()))


def is_valid_iso_date(value: object) -> bool:
    text = str(value or "").strip()
    if not _DATE_RE.match(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def _to_minutes(value: str) -> int | None:
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_between(start: str, end: str) -> int | None:
    start_minutes = _to_minutes(start or "")
    end_minutes = _to_minutes(end or "")
    if start_minutes is None or end_minutes is None:
        return None
    diff = end_minutes - start_minutes
    if diff < 0:
        return None
    return diff


def format_duration(start: str, end: str) -> str:
    diff = minutes_between(start, end)
    if diff is None:
        return "--"
    hours, minutes = divmod(diff, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def procedure_durations(registry: SedationFieldRegistry) -> dict[str, str]:
    return {
        "Preparation Time": format_duration(registry.time_in_room, registry.sedation_start_time),
        "Sedation Duration": format_duration(registry.sedation_start_time, registry.sedation_end_time),
        "Recovery Time": format_duration(registry.sedation_end_time, registry.out_of_room_time),
        "Total Time In Room": format_duration(registry.time_in_room, registry.out_of_room_time),
    }


def current_time_hhmm(now: datetime | None = None) -> str:
    moment = now or datetime.now()
    return moment.strftime("%H:%M")
