"""
Scheduling Reasoning Engine

Pure computations over pre-fetched UserScheduleData / TeamPresenceDay
snapshots: comparison, team-average comparison, pairwise overlap,
multi-person coordination, optimization ranking, simulation and trend.

Nothing here queries the database; see data_retrieval for building inputs.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from attendance.services.date_tools import DAY_NAMES, day_index, parse_iso_date
from attendance.services.presence import FULL_PRESENCE, HALF_PRESENCE, score_on
from attendance.services.schedule_types import (
    ComparisonResult,
    DayRecommendation,
    MultiPersonOverlapResult,
    OptimizationGoal,
    OptimizationResult,
    OverlapResult,
    SimulationResult,
    TeamAvgComparisonResult,
    TeamPresenceDay,
    TrendResult,
    UserScheduleData,
)

logger = logging.getLogger(__name__)

WORKDAY_PATTERN = r'(monday|tuesday|wednesday|thursday|friday)'
AVOID_RE = re.compile(r'avoid\s+' + WORKDAY_PATTERN + r's?')
ONLY_RE = re.compile(
    r'only\s+(?:on\s+)?((?:' + WORKDAY_PATTERN + r's?(?:\s+and\s+|\s*,\s*)?)+)'
)
WORKDAY_RE = re.compile(WORKDAY_PATTERN)

DEFAULT_RECOMMENDATION_COUNT = 5


def _day_label(day: str) -> str:
    return DAY_NAMES[parse_iso_date(day).weekday()].capitalize()


# ===== COMPARISON =====

def compute_comparison(user_a: UserScheduleData, user_b: UserScheduleData) -> ComparisonResult:
    """Office-day difference between two users and who came in more"""
    office_a = user_a.stats.office_days
    office_b = user_b.stats.office_days

    if office_a > office_b:
        who_has_more = user_a.name
    elif office_b > office_a:
        who_has_more = user_b.name
    else:
        who_has_more = 'tied'

    return ComparisonResult(
        user_a=user_a.name,
        user_b=user_b.name,
        stats_a=user_a.stats,
        stats_b=user_b.stats,
        diff=abs(office_a - office_b),
        who_has_more=who_has_more,
        percentage_diff=abs(user_a.stats.office_percent - user_b.stats.office_percent),
    )


def compute_team_avg_comparison(
    user: UserScheduleData,
    team: Sequence[UserScheduleData],
) -> TeamAvgComparisonResult:
    """
    Compare a user's office rate to the average of their peers

    The user is always excluded from the average, so a team containing only
    the user compares against an average of 0.
    """
    peers = [member for member in team if member.user_id != user.user_id]

    if peers:
        avg_percent = round(sum(p.stats.office_percent for p in peers) / len(peers))
        avg_days = round(sum(p.stats.office_days for p in peers) / len(peers), 1)
    else:
        avg_percent = 0
        avg_days = 0.0

    user_percent = user.stats.office_percent
    if user_percent > avg_percent:
        above_or_below = 'above'
    elif user_percent < avg_percent:
        above_or_below = 'below'
    else:
        above_or_below = 'at'

    return TeamAvgComparisonResult(
        user_name=user.name,
        user_stats=user.stats,
        team_avg_office_percent=avg_percent,
        team_avg_office_days=avg_days,
        peer_count=len(peers),
        diff=abs(user_percent - avg_percent),
        above_or_below=above_or_below,
    )


# ===== OVERLAP =====

def compute_overlap(user_a: UserScheduleData, user_b: UserScheduleData) -> OverlapResult:
    """
    Pairwise office overlap over the days both users were expected to work

    Per day the overlap is min(score_a, score_b): two half days overlap by
    0.5, so total_overlap counts two half-day overlaps as one full day.
    """
    shared_days = sorted(set(user_a.working_days) & set(user_b.working_days))
    full, partial, zero = [], [], []
    total = 0.0

    for day in shared_days:
        overlap = min(score_on(user_a, day), score_on(user_b, day))
        if overlap >= FULL_PRESENCE:
            full.append(day)
        elif overlap > 0:
            partial.append(day)
        else:
            zero.append(day)
        total += overlap

    return OverlapResult(
        user_a=user_a.name,
        user_b=user_b.name,
        total_overlap=total,
        full_overlap_days=full,
        partial_overlap_days=partial,
        zero_overlap_days=zero,
        working_days_count=len(shared_days),
    )


def compute_multi_person_overlap(schedules: Sequence[UserScheduleData]) -> MultiPersonOverlapResult:
    """Days on which every participant is in office for the full day"""
    if not schedules:
        return MultiPersonOverlapResult(people=[], all_in_office_days=[], working_days_count=0)

    shared_days = set(schedules[0].working_days)
    for schedule in schedules[1:]:
        shared_days &= set(schedule.working_days)
    shared_days = sorted(shared_days)

    all_in = [
        day for day in shared_days
        if all(score_on(schedule, day) >= FULL_PRESENCE for schedule in schedules)
    ]

    return MultiPersonOverlapResult(
        people=[schedule.name for schedule in schedules],
        all_in_office_days=all_in,
        working_days_count=len(shared_days),
    )


# ===== OPTIMIZATION =====

def parse_day_constraints(constraints: Iterable[Any]) -> Tuple[List[str], List[str]]:
    """
    Extract weekday filters from constraints

    Each constraint is either a structured dict ({"avoid_days": [...],
    "only_days": [...]}) or a free-text string matched against "avoid
    <weekday>" and "only (on) <weekday list>".

    Returns:
        (avoid_days, only_days) as lowercase weekday names in week order
    """
    avoid, only = set(), set()

    for constraint in constraints or []:
        if isinstance(constraint, dict):
            avoid.update(i for i in map(day_index, constraint.get('avoid_days') or []) if i is not None)
            only.update(i for i in map(day_index, constraint.get('only_days') or []) if i is not None)
            continue
        if not isinstance(constraint, str):
            continue

        text = constraint.lower()
        avoid_match = AVOID_RE.search(text)
        if avoid_match:
            avoid.add(day_index(avoid_match.group(1)))
        only_match = ONLY_RE.search(text)
        if only_match:
            only.update(day_index(name) for name in WORKDAY_RE.findall(only_match.group(1)))

    return [DAY_NAMES[i] for i in sorted(avoid)], [DAY_NAMES[i] for i in sorted(only)]


def _resolve_optimization_intent(goal: str, intent: Optional[str]) -> str:
    if intent in ('optimize', 'avoid', 'meeting_plan'):
        return intent
    if 'avoid' in goal:
        return 'avoid'
    if 'meeting' in goal:
        return 'meeting_plan'
    return 'optimize'


def _team_ratio(presence: TeamPresenceDay) -> float:
    return presence.count / presence.total_team if presence.total_team > 0 else 0.0


def _score_day(
    day: str,
    goal: str,
    targets: Sequence[UserScheduleData],
    presence: Optional[TeamPresenceDay],
) -> Tuple[float, List[str]]:
    score = 0.0
    reasons = []

    if goal == OptimizationGoal.MINIMIZE_OVERLAP.value:
        for target in targets:
            target_score = score_on(target, day)
            score += 1 - target_score
            if target_score == 0:
                reasons.append(f"{target.name} is NOT in office")
            elif target_score == HALF_PRESENCE:
                reasons.append(f"{target.name} is only half-day in office")

    elif goal in (OptimizationGoal.MAXIMIZE_OVERLAP.value, 'meeting_plan'):
        for target in targets:
            target_score = score_on(target, day)
            score += target_score
            if target_score >= FULL_PRESENCE:
                reasons.append(f"{target.name} is in office")
            elif target_score == HALF_PRESENCE:
                reasons.append(f"{target.name} is half-day in office")

    elif goal == OptimizationGoal.MINIMIZE_COMMUTE.value:
        score += 0.5
        reasons.append('Base commute preference score')

    elif goal == OptimizationGoal.LEAST_CROWDED.value:
        if presence:
            score += 1 - _team_ratio(presence)
            reasons.append(f"{presence.count:g} of {presence.total_team} people in office")
        else:
            score += 0.5
            reasons.append('No attendance data for this day')

    elif goal == OptimizationGoal.MAXIMIZE_TEAM_PRESENCE.value:
        if presence:
            score += _team_ratio(presence)
            reasons.append(f"{presence.count:g} of {presence.total_team} people in office")

    elif targets:
        score += sum(score_on(target, day) for target in targets)
    elif presence:
        score += _team_ratio(presence)

    return score, reasons


def find_optimal_days(
    user: UserScheduleData,
    targets: Sequence[UserScheduleData] = (),
    team_presence: Sequence[TeamPresenceDay] = (),
    goal: str = '',
    constraints: Iterable[Any] = (),
    required_days: Optional[int] = None,
    intent: Optional[str] = None,
) -> OptimizationResult:
    """
    Rank the user's working days for an optimize / avoid / meeting-plan request

    Args:
        user: Subject whose working days are candidates
        targets: Other users whose presence drives overlap goals
        team_presence: Per-day team counts for crowding goals
        goal: One of OptimizationGoal values, 'meeting_plan', or free text
        constraints: Structured or free-text weekday constraints; these are
            hard filters applied before scoring
        required_days: How many days to return (default min(5, candidates))
        intent: Explicit intent; derived from goal text when omitted

    Returns:
        OptimizationResult with recommendations sorted by score descending,
        ties kept in chronological order
    """
    goal = goal or ''
    constraints = list(constraints or [])
    avoid_days, only_days = parse_day_constraints(constraints)
    avoid_set, only_set = set(avoid_days), set(only_days)
    presence_by_day = {presence.date: presence for presence in team_presence}

    scored = []
    for day in user.working_days:
        day_name = DAY_NAMES[parse_iso_date(day).weekday()]
        if day_name in avoid_set:
            continue
        if only_set and day_name not in only_set:
            continue

        entry = user.entry_map.get(day)
        if entry is not None and entry.is_full_leave:
            continue

        score, reasons = _score_day(day, goal, targets, presence_by_day.get(day))
        reasons.append(day_name.capitalize())
        scored.append(DayRecommendation(
            date=day,
            day=day_name.capitalize(),
            score=round(score, 2),
            reasons=reasons,
        ))

    # sorted() is stable, so equal scores stay chronological
    scored = sorted(scored, key=lambda rec: rec.score, reverse=True)
    count = required_days if required_days is not None else min(DEFAULT_RECOMMENDATION_COUNT, len(scored))

    logger.debug(f"Optimization for {user.name}: goal={goal!r}, {len(scored)} candidate days")

    return OptimizationResult(
        goal=goal,
        recommendations=scored[:max(int(count), 0)],
        constraints=[c for c in constraints if isinstance(c, str)],
        avoid_days=avoid_days,
        only_days=only_days,
        intent=_resolve_optimization_intent(goal, intent),
    )


# ===== SIMULATION =====

def simulate_schedule(proposed_days: Sequence[str], target: UserScheduleData) -> SimulationResult:
    """Which proposed dates would overlap (fully or partially) with the target"""
    proposed = sorted(set(proposed_days))
    overlap = [day for day in proposed if score_on(target, day) > 0]
    percent = round(len(overlap) / len(proposed) * 100) if proposed else 0

    return SimulationResult(
        target_name=target.name,
        proposed_days=proposed,
        overlap_days=overlap,
        overlap_count=len(overlap),
        total_proposed=len(proposed),
        overlap_percent=percent,
    )


def expand_day_of_week_to_date_list(day_names: Iterable[str], working_days: Iterable[str]) -> List[str]:
    """Turn weekday names (e.g. ["tuesday"]) into the matching working days"""
    wanted = {i for i in map(day_index, day_names) if i is not None}
    return sorted(day for day in set(working_days) if parse_iso_date(day).weekday() in wanted)


# ===== TREND =====

def compute_trend(
    current: UserScheduleData,
    previous: UserScheduleData,
    current_label: str = 'this period',
    previous_label: str = 'last period',
) -> TrendResult:
    """Office-day change between two snapshots of the same user"""
    delta = current.stats.office_days - previous.stats.office_days
    if delta > 0:
        direction = 'more'
    elif delta < 0:
        direction = 'fewer'
    else:
        direction = 'same'

    return TrendResult(
        user_name=current.name,
        current=current.stats,
        previous=previous.stats,
        current_label=current_label,
        previous_label=previous_label,
        diff=abs(delta),
        direction=direction,
    )
