"""
Tests for interview slot generation and scoring.
"""

from datetime import date, datetime

import pytest

from simplifyhr.services.slot_scorer import MergedSlot, generate_merged_slots, score_slot, toggle_slot

FRIDAY = date(2024, 1, 5)


@pytest.mark.parametrize("hour,expected", [
    (9, 85),
    (10, 100),
    (11, 85),
    (13, 70),
    (14, 90),
    (15, 90),
    (16, 75),
    (17, 75),
])
def test_score_slot_by_start_hour(hour, expected):
    assert score_slot(datetime(2024, 1, 8, hour)) == expected


def test_slots_cover_weekdays_after_today():
    slots = generate_merged_slots([1], [10], 60, today=FRIDAY)

    days = sorted({s.start.date() for s in slots})
    assert days[0] == date(2024, 1, 8)
    assert days[-1] == date(2024, 1, 18)
    assert len(days) == 9
    assert all(d.weekday() < 5 for d in days)
    assert FRIDAY not in days


def test_sixty_minute_day_skips_lunch():
    slots = generate_merged_slots([1], [10], 60, today=FRIDAY)
    monday = [s.start.hour for s in slots if s.start.date() == date(2024, 1, 8)]

    assert monday == [9, 10, 11, 13, 14, 15, 16, 17]
    assert len(slots) == 9 * 8


def test_slots_must_end_by_six():
    slots = generate_merged_slots([1], [10], 90, today=FRIDAY)
    monday = [s for s in slots if s.start.date() == date(2024, 1, 8)]

    assert [s.start.hour for s in monday] == [9, 10, 11, 13, 14, 15, 16]
    assert all(s.end <= datetime(2024, 1, 8, 18) for s in monday)


def test_slots_sorted_and_list_everyone():
    slots = generate_merged_slots([1, 2], [10, 11], 45, today=FRIDAY)

    assert slots == sorted(slots, key=lambda s: s.start)
    assert all(s.candidate_ids == [1, 2] and s.interviewer_ids == [10, 11] for s in slots)


@pytest.mark.parametrize("candidates,interviewers", [([], [10]), ([1], []), ([], [])])
def test_no_slots_without_both_sides(candidates, interviewers):
    assert generate_merged_slots(candidates, interviewers, 60, today=FRIDAY) == []


def test_non_positive_duration_rejected():
    with pytest.raises(ValueError):
        generate_merged_slots([1], [10], 0, today=FRIDAY)


def test_toggle_slot_adds_then_removes():
    slot = MergedSlot(start=datetime(2024, 1, 8, 10), end=datetime(2024, 1, 8, 11))
    same_time = MergedSlot(start=datetime(2024, 1, 8, 10), end=datetime(2024, 1, 8, 11), score=100)

    selected = toggle_slot([], slot)
    assert selected == [slot]
    assert toggle_slot(selected, same_time) == []
