"""
Data Retrieval Service

Builds the request-scoped snapshots the reasoning engine works on
(UserScheduleData, TeamPresenceDay) from the User, Entry and Holiday tables.
Everything returned is detached from the session.
"""
import logging
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from attendance.models import get_models
from attendance.services.presence import presence_score
from attendance.services.schedule_types import (
    AttendanceStats,
    CoverageLevel,
    DataCoverage,
    EntryData,
    EntryStatus,
    LeaveDuration,
    TeamPresenceDay,
    UserScheduleData,
    WorkingPortion,
)
from attendance.services.working_days import get_working_days

logger = logging.getLogger(__name__)

LOW_COVERAGE_RATIO = 0.4
MEDIUM_COVERAGE_RATIO = 0.8


def _as_date(value) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def get_holiday_set(start_date: str, end_date: str) -> Set[str]:
    """Holiday dates within an inclusive range"""
    Holiday = get_models()['Holiday']
    return Holiday.get_holiday_dates(start_date, end_date)


def get_holiday_context(dates: List[str]) -> Optional[Dict[str, Any]]:
    """Modifier context with the stored holidays spanning a generated date list"""
    if not dates:
        return None
    return {'holidays': sorted(get_holiday_set(dates[0], dates[-1]))}


def get_entry_map(user_id: int, start_date: str, end_date: str) -> Dict[str, EntryData]:
    """One user's entries in a range, keyed by YYYY-MM-DD"""
    Entry = get_models()['Entry']
    entries = Entry.query.filter(
        Entry.user_id == user_id,
        Entry.date >= _as_date(start_date),
        Entry.date <= _as_date(end_date)
    ).all()
    return {entry.date.isoformat(): entry.to_entry_data() for entry in entries}


def compute_attendance_stats(working_days: Sequence[str], entry_map: Dict[str, EntryData]) -> AttendanceStats:
    """
    Office / leave / WFH counts over working days

    A full office day counts 1. Half-day leave counts 0.5 leave, plus 0.5
    office when the working half was in the office. Full leave counts 1.
    Whatever is left over is WFH.
    """
    office_days = 0.0
    leave_days = 0.0

    for day in working_days:
        entry = entry_map.get(day)
        if entry is None:
            continue
        if entry.status == EntryStatus.OFFICE.value:
            office_days += 1
        elif entry.status == EntryStatus.LEAVE.value:
            if entry.leave_duration == LeaveDuration.HALF.value:
                leave_days += 0.5
                if entry.working_portion == WorkingPortion.OFFICE.value:
                    office_days += 0.5
            else:
                leave_days += 1

    total = len(working_days)
    return AttendanceStats(
        office_days=office_days,
        leave_days=leave_days,
        wfh_days=total - office_days - leave_days,
        total_working_days=total,
        office_percent=round(office_days / total * 100) if total > 0 else 0,
    )


def compute_data_coverage(working_days: Sequence[str], entry_map: Dict[str, EntryData]) -> DataCoverage:
    """How many working days carry an explicit entry"""
    days_with_entries = sum(1 for day in working_days if day in entry_map)
    ratio = days_with_entries / len(working_days) if working_days else 0

    if days_with_entries == 0:
        level = CoverageLevel.NONE
    elif ratio < LOW_COVERAGE_RATIO:
        level = CoverageLevel.LOW
    elif ratio < MEDIUM_COVERAGE_RATIO:
        level = CoverageLevel.MEDIUM
    else:
        level = CoverageLevel.HIGH

    return DataCoverage(
        days_with_entries=days_with_entries,
        total_working_days=len(working_days),
        coverage_percent=round(ratio * 100),
        level=level,
    )


def build_user_schedule(
    user_id: int,
    name: str,
    start_date: str,
    end_date: str,
    holiday_set: Set[str],
    entry_map: Dict[str, EntryData],
) -> UserScheduleData:
    working_days = get_working_days(start_date, end_date, holiday_set)
    return UserScheduleData(
        user_id=user_id,
        name=name,
        working_days=working_days,
        entry_map=entry_map,
        stats=compute_attendance_stats(working_days, entry_map),
        coverage=compute_data_coverage(working_days, entry_map),
    )


def get_user_schedule_data(
    user,
    start_date: str,
    end_date: str,
    holiday_set: Optional[Set[str]] = None,
) -> UserScheduleData:
    """
    Schedule snapshot for one user

    Args:
        user: User model instance
        start_date: YYYY-MM-DD (inclusive)
        end_date: YYYY-MM-DD (inclusive)
        holiday_set: Preloaded holidays; fetched when omitted
    """
    if holiday_set is None:
        holiday_set = get_holiday_set(start_date, end_date)
    entry_map = get_entry_map(user.id, start_date, end_date)
    return build_user_schedule(user.id, user.name, start_date, end_date, holiday_set, entry_map)


def get_multiple_user_schedules(users: Iterable, start_date: str, end_date: str) -> List[UserScheduleData]:
    """Snapshots for several users, sharing one holiday lookup"""
    holiday_set = get_holiday_set(start_date, end_date)
    return [get_user_schedule_data(user, start_date, end_date, holiday_set) for user in users]


def get_team_schedules(start_date: str, end_date: str) -> List[UserScheduleData]:
    """Snapshots for every active user"""
    User = get_models()['User']
    users = User.query.filter_by(is_active=True).order_by(User.id).all()
    return get_multiple_user_schedules(users, start_date, end_date)


def get_team_presence_by_day(start_date: str, end_date: str) -> List[TeamPresenceDay]:
    """
    People physically in the office on each working day of a range

    ``count`` sums presence scores, so a half day worked in the office adds
    0.5. ``total_team`` is the number of active users.
    """
    models = get_models()
    User, Entry = models['User'], models['Entry']

    users = User.query.filter_by(is_active=True).all()
    names = {user.id: user.name for user in users}
    holiday_set = get_holiday_set(start_date, end_date)
    working_days = get_working_days(start_date, end_date, holiday_set)

    entries = []
    if names:
        entries = Entry.query.filter(
            Entry.user_id.in_(list(names)),
            Entry.date >= _as_date(start_date),
            Entry.date <= _as_date(end_date)
        ).all()

    by_day: Dict[str, List] = {}
    for entry in entries:
        by_day.setdefault(entry.date.isoformat(), []).append(entry)

    presence = []
    for day in working_days:
        count = 0.0
        office_users = []
        for entry in by_day.get(day, []):
            score = presence_score(entry.to_entry_data())
            if score > 0:
                count += score
                office_users.append(names[entry.user_id])
        presence.append(TeamPresenceDay(
            date=day,
            count=count,
            total_team=len(users),
            office_users=sorted(office_users),
        ))

    logger.debug(f"Team presence {start_date}..{end_date}: {len(presence)} working days, {len(users)} users")
    return presence


def find_user_by_name(name: str):
    """
    Resolve a person by name among active users

    Tries an exact case-insensitive match first, then a match on any whole
    word of the stored name (so "Asha" finds "Asha Rao").

    Returns:
        User instance or None
    """
    if not name or not name.strip():
        return None

    User = get_models()['User']
    needle = name.strip().lower()
    users = User.query.filter_by(is_active=True).order_by(User.id).all()

    for user in users:
        if user.name.lower() == needle:
            return user

    for user in users:
        words = re.split(r'\s+', user.name.lower())
        if needle in words or any(word.startswith(needle) for word in words):
            return user

    return None
