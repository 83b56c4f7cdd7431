from datetime import date

import pytest

from core.exceptions import ValidationError
from core.geo import haversine_km, rank_by_distance
from services.stats import compute_bmi, compute_streak

HOME = (12.9716, 77.5946)

NEAR = {"id": "near", "latitude": 12.98, "longitude": 77.60}
FAR = {"id": "far", "latitude": 13.40, "longitude": 77.60}
NOWHERE = {"id": "nowhere", "latitude": None, "longitude": None}


def test_haversine_one_degree_of_longitude_at_equator():
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.19, abs=0.01)


def test_rank_keeps_gyms_inside_radius():
    ranked, expanded = rank_by_distance([FAR, NOWHERE, NEAR], *HOME, radius_km=10)

    assert expanded is False
    assert [g["id"] for g in ranked] == ["near"]
    assert ranked[0]["distance"] == pytest.approx(1.1, abs=0.2)


def test_rank_falls_back_to_closest_when_radius_is_empty():
    ranked, expanded = rank_by_distance([FAR, NOWHERE, NEAR], *HOME, radius_km=0.1)

    assert expanded is True
    assert [g["id"] for g in ranked] == ["near", "far"]


def test_rank_without_any_coordinates():
    assert rank_by_distance([NOWHERE], *HOME) == ([], False)


def test_rank_does_not_mutate_input():
    rank_by_distance([NEAR], *HOME)
    assert "distance" not in NEAR


TODAY = date(2024, 5, 10)


def test_streak_counts_back_from_today():
    dates = ["2024-05-10", "2024-05-09", "2024-05-08", "2024-05-06"]
    assert compute_streak(dates, today=TODAY) == 3


def test_streak_survives_a_rest_day_today():
    assert compute_streak(["2024-05-09", "2024-05-08"], today=TODAY) == 2


def test_streak_is_broken_after_two_idle_days():
    assert compute_streak(["2024-05-08", "2024-05-07"], today=TODAY) == 0


def test_streak_ignores_future_and_duplicate_days():
    dates = [date(2024, 5, 11), date(2024, 5, 10), date(2024, 5, 10)]
    assert compute_streak(dates, today=TODAY) == 1


def test_bmi():
    assert compute_bmi(70, 175) == 22.86


@pytest.mark.parametrize("weight, height", [(None, 170), (70, 0), (-1, 170)])
def test_bmi_rejects_bad_input(weight, height):
    with pytest.raises(ValidationError):
        compute_bmi(weight, height)
