from datetime import datetime
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidInputError
from app.models.enums import Difficulty
from app.services.srs_service import (
    ScheduleResult,
    calculate_next_review_date,
    calculate_next_schedule,
    parse_difficulty,
    round_half_away_from_zero,
)


@pytest.mark.parametrize('interval, ease, difficulty, expected', [
    (1, 2.5, 'good', ScheduleResult(3, 2.5)),
    (6, 2.5, 'again', ScheduleResult(1, 2.3)),
    (4, 2.0, 'hard', ScheduleResult(5, 1.85)),
    (3, 2.5, 'easy', ScheduleResult(10, 2.65)),
])
def test_reference_scenarios(interval, ease, difficulty, expected):
    assert calculate_next_schedule(interval, ease, difficulty) == expected


def test_again_floors_ease_at_minimum():
    result = calculate_next_schedule(10, 1.4, Difficulty.AGAIN)
    assert result.interval == 1
    assert result.ease_factor == 1.3


def test_hard_floors_ease_and_interval():
    result = calculate_next_schedule(1, 1.3, Difficulty.HARD)
    # round(1.2) == 1
    assert result.interval == 1
    assert result.ease_factor == 1.3


def test_good_keeps_ease_factor():
    result = calculate_next_schedule(10, 2.3, 'good')
    assert result.interval == 23
    assert result.ease_factor == 2.3


def test_easy_has_no_ease_ceiling():
    ease = 2.5
    interval = 1
    for _ in range(20):
        interval, ease = calculate_next_schedule(interval, ease, 'easy')
    assert ease == pytest.approx(2.5 + 20 * 0.15)
    assert ease > 5.0


def test_rounding_is_half_away_from_zero():
    assert round_half_away_from_zero(Decimal('2.5')) == 3
    assert round_half_away_from_zero(Decimal('3.5')) == 4
    assert round_half_away_from_zero(Decimal('9.75')) == 10
    assert round_half_away_from_zero(Decimal('2.49')) == 2
    assert round_half_away_from_zero(Decimal('-2.5')) == -3


def test_half_interval_rounds_up_not_to_even():
    # 5 * 1.3 = 6.5: banker's rounding would give 6
    assert calculate_next_schedule(5, 1.3, 'good').interval == 7
    # 5 * 2.5 = 12.5
    assert calculate_next_schedule(5, 2.5, 'good').interval == 13


def test_ease_factor_does_not_drift():
    ease = 2.5
    for _ in range(3):
        _, ease = calculate_next_schedule(1, ease, 'again')
    assert ease == 1.9
    _, ease = calculate_next_schedule(1, ease, 'easy')
    assert ease == 2.05


def test_deterministic_for_same_inputs():
    results = {calculate_next_schedule(7, 2.15, 'hard') for _ in range(50)}
    assert results == {ScheduleResult(8, 2.0)}


@pytest.mark.parametrize('difficulty', list(Difficulty))
@pytest.mark.parametrize('interval', [1, 2, 3, 10, 180])
@pytest.mark.parametrize('ease', [1.3, 1.45, 2.5, 3.1])
def test_invariants_hold_for_all_ratings(difficulty, interval, ease):
    result = calculate_next_schedule(interval, ease, difficulty)
    assert result.interval >= 1
    assert result.ease_factor >= 1.3


def test_parse_difficulty_accepts_strings_and_enum():
    assert parse_difficulty('easy') is Difficulty.EASY
    assert parse_difficulty(Difficulty.HARD) is Difficulty.HARD


@pytest.mark.parametrize('bad', ['', 'Good', 'medium', 'perfect', None, 3])
def test_parse_difficulty_rejects_unknown_values(bad):
    with pytest.raises(InvalidInputError):
        parse_difficulty(bad)


def test_unknown_difficulty_never_produces_schedule():
    with pytest.raises(InvalidInputError):
        calculate_next_schedule(4, 2.5, 'medium')


def test_next_review_date_adds_calendar_days():
    base = datetime(2026, 12, 30, 18, 45)
    assert calculate_next_review_date(3, base) == datetime(2027, 1, 2, 18, 45)
    assert calculate_next_review_date(1, datetime(2028, 2, 28, 0, 0)) == datetime(2028, 2, 29, 0, 0)
