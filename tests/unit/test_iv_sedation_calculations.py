from __future__ import annotations

from datetime import datetime

import pytest

from sedation_chart.domain.models.iv_sedation import SedationFieldRegistry
from sedation_chart.domain.rules.iv_sedation_calculations import (
    BMI_NOT_CALCULATED,
    bmi_category,
    calculate_bmi,
    current_time_hhmm,
    format_duration,
    is_obese,
    is_valid_iso_date,
    is_valid_time,
    minutes_between,
    procedure_durations,
)


def test_bmi_normal_weight() -> None:
    bmi = calculate_bmi("5", "6", "150")

    assert bmi == pytest.approx(24.2, abs=0.1)
    assert bmi_category(bmi) == "Normal"
    assert is_obese(bmi) is False


def test_bmi_obese_weight() -> None:
    bmi = calculate_bmi(5, 6, 250)

    assert bmi == pytest.approx(40.3, abs=0.1)
    assert bmi_category(bmi) == "Obese"
    assert is_obese(bmi) is True


@pytest.mark.parametrize(
    ("feet", "inches", "weight"),
    [("", "6", "150"), ("5", "6", ""), ("5", "6", "0"), ("x", "6", "150")],
)
def test_bmi_not_calculated_for_incomplete_input(feet: str, inches: str, weight: str) -> None:
    bmi = calculate_bmi(feet, inches, weight)

    assert bmi is None
    assert bmi_category(bmi) == BMI_NOT_CALCULATED


@pytest.mark.parametrize(
    ("bmi", "category"),
    [(18.4, "Underweight"), (18.5, "Normal"), (24.99, "Normal"), (25.0, "Overweight"), (30.0, "Obese")],
)
def test_bmi_category_boundaries(bmi: float, category: str) -> None:
    assert bmi_category(bmi) == category


def test_is_valid_time() -> None:
    assert is_valid_time("09:05")
    assert is_valid_time("23:59")
    assert not is_valid_time("24:00")
    assert not is_valid_time("9:05")
    assert not is_valid_time("")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-03-01", True),
        (" 2024-02-29 ", True),
        ("2025-02-29", False),
        ("next tuesday", False),
        ("03/01/2025", False),
        ("20250301", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_iso_date(value: object, expected: bool) -> None:
    assert is_valid_iso_date(value) is expected


def test_minutes_between_rejects_negative_spans() -> None:
    assert minutes_between("09:00", "10:30") == 90
    assert minutes_between("10:30", "09:00") is None
    assert minutes_between("", "09:00") is None


def test_format_duration() -> None:
    assert format_duration("09:00", "09:45") == "45m"
    assert format_duration("09:00", "11:05") == "2h 5m"
    assert format_duration("09:00", "") == "--"


def test_procedure_durations() -> None:
    registry = SedationFieldRegistry(
        time_in_room="09:00",
        sedation_start_time="09:15",
        sedation_end_time="10:05",
        out_of_room_time="10:40",
    )

    assert procedure_durations(registry) == {
        "Preparation Time": "15m",
        "Sedation Duration": "50m",
        "Recovery Time": "35m",
        "Total Time In Room": "1h 40m",
    }


def test_current_time_hhmm_formats_given_moment() -> None:
    assert current_time_hhmm(datetime(2025, 3, 1, 14, 30, 59)) == "14:30"
