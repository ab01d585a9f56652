"""
Presence scoring

The single definition of how much of a day a user is physically in the
office. Reasoning code and team-presence counting call these helpers rather
than inspecting entry status themselves.
"""
from typing import Optional

from attendance.services.schedule_types import (
    EntryData,
    EntryStatus,
    LeaveDuration,
    UserScheduleData,
    WorkingPortion,
)

FULL_PRESENCE = 1.0
HALF_PRESENCE = 0.5
NO_PRESENCE = 0.0


def presence_score(entry: Optional[EntryData]) -> float:
    """
    Score an entry as 1.0 (office), 0.5 (half-day leave worked in office) or 0

    No entry means the user worked from home that day.
    """
    if entry is None:
        return NO_PRESENCE
    if entry.status == EntryStatus.OFFICE.value:
        return FULL_PRESENCE
    if (entry.status == EntryStatus.LEAVE.value
            and entry.leave_duration == LeaveDuration.HALF.value
            and entry.working_portion == WorkingPortion.OFFICE.value):
        return HALF_PRESENCE
    return NO_PRESENCE


def score_on(schedule: UserScheduleData, day: str) -> float:
    """Presence score of a user on a given YYYY-MM-DD"""
    return presence_score(schedule.entry_map.get(day))
