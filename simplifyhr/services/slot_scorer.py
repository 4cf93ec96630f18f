"""
Availability Slot Scorer

Builds the merged calendar shown when scheduling interviews:
- Horizon: tomorrow through 13 days ahead (14-day window, today excluded)
- Weekdays only
- Hourly starts 09:00-17:00, lunch hour (12:00) skipped
- A slot must end by 18:00
- Every selected candidate and interviewer is listed on every slot

The score is a static time-of-day preference, not an availability check:
free-time windows are displayed next to the slots but do not filter them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence

HORIZON_DAYS = 14
DAY_START_HOUR = 9
DAY_END_HOUR = 18
LUNCH_HOUR = 12


@dataclass
class MergedSlot:
    start: datetime
    end: datetime
    candidate_ids: List[int] = field(default_factory=list)
    interviewer_ids: List[int] = field(default_factory=list)
    score: int = 70

    def same_time(self, other: "MergedSlot") -> bool:
        return self.start == other.start and self.end == other.end


def score_slot(start: datetime) -> int:
    """
    Preference by start hour:
    10-11 -> 100, 14-16 -> 90, other mornings -> 85, 16-18 -> 75, else 70.
    """
    hour = start.hour
    if 10 <= hour < 11:
        return 100
    if 14 <= hour < 16:
        return 90
    if 9 <= hour < 12:
        return 85
    if 16 <= hour < 18:
        return 75
    return 70


def generate_day_slots(
    day: date,
    duration_minutes: int,
    candidate_ids: Sequence[int],
    interviewer_ids: Sequence[int]
) -> List[MergedSlot]:
    """Slots for a single day, in start order."""
    slots = []
    day_end = datetime.combine(day, time(DAY_END_HOUR))

    for hour in range(DAY_START_HOUR, DAY_END_HOUR):
        if hour == LUNCH_HOUR:
            continue

        start = datetime.combine(day, time(hour))
        end = start + timedelta(minutes=duration_minutes)
        if end > day_end:
            continue

        slots.append(MergedSlot(
            start=start,
            end=end,
            candidate_ids=list(candidate_ids),
            interviewer_ids=list(interviewer_ids),
            score=score_slot(start)
        ))

    return slots


def generate_merged_slots(
    candidate_ids: Sequence[int],
    interviewer_ids: Sequence[int],
    duration_minutes: int,
    today: Optional[date] = None
) -> List[MergedSlot]:
    """
    All scored slots across the horizon, sorted by start.

    Returns an empty list when either side has nobody selected.
    """
    if not candidate_ids or not interviewer_ids:
        return []
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    today = today or date.today()
    merged = []

    for offset in range(1, HORIZON_DAYS):
        day = today + timedelta(days=offset)
        if day.weekday() >= 5:  # Saturday, Sunday
            continue
        merged.extend(generate_day_slots(day, duration_minutes, candidate_ids, interviewer_ids))

    merged.sort(key=lambda s: s.start)
    return merged


def toggle_slot(selected: List[MergedSlot], slot: MergedSlot) -> List[MergedSlot]:
    """Select ``slot``, or deselect it when a slot with the same start/end is already selected."""
    remaining = [s for s in selected if not s.same_time(slot)]
    if len(remaining) == len(selected):
        return selected + [slot]
    return remaining
