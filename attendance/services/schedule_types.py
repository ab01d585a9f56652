"""
Schedule types and data classes for attendance reasoning
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def camelize(value: Any) -> Any:
    """Rewrite snake_case dict keys as camelCase, recursively, for JSON responses"""
    if isinstance(value, dict):
        return {_camel(key) if isinstance(key, str) else key: camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


class WireResult:
    """Mixin for reasoning results returned over the API"""

    def to_dict(self) -> Dict[str, Any]:
        return camelize(asdict(self))


class EntryStatus(str, Enum):
    """Persisted status of a day; no entry means working from home"""
    OFFICE = "office"
    LEAVE = "leave"


class LeaveDuration(str, Enum):
    FULL = "full"
    HALF = "half"


class HalfDayPortion(str, Enum):
    FIRST_HALF = "first-half"
    SECOND_HALF = "second-half"


class WorkingPortion(str, Enum):
    """Where the non-leave half of a half-day leave is worked"""
    WFH = "wfh"
    OFFICE = "office"


class OptimizationGoal(str, Enum):
    MINIMIZE_OVERLAP = "minimize_overlap"
    MAXIMIZE_OVERLAP = "maximize_overlap"
    MINIMIZE_COMMUTE = "minimize_commute"
    LEAST_CROWDED = "least_crowded"
    MAXIMIZE_TEAM_PRESENCE = "maximize_team_presence"


class CoverageLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class EntryData:
    """One user's attendance record for one day"""
    status: str
    leave_duration: Optional[str] = None
    half_day_portion: Optional[str] = None
    working_portion: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_full_leave(self) -> bool:
        return self.status == EntryStatus.LEAVE.value and self.leave_duration != LeaveDuration.HALF.value

    @property
    def is_half_day(self) -> bool:
        return self.status == EntryStatus.LEAVE.value and self.leave_duration == LeaveDuration.HALF.value

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class AttendanceStats:
    office_days: float = 0
    leave_days: float = 0
    wfh_days: float = 0
    total_working_days: int = 0
    office_percent: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DataCoverage:
    """How much of a range actually has recorded entries"""
    days_with_entries: int
    total_working_days: int
    coverage_percent: int
    level: CoverageLevel

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['level'] = self.level.value
        return result


@dataclass
class UserScheduleData:
    """Request-scoped snapshot of one user's schedule over a range"""
    user_id: int
    name: str
    working_days: List[str] = field(default_factory=list)
    entry_map: Dict[str, EntryData] = field(default_factory=dict)
    stats: AttendanceStats = field(default_factory=AttendanceStats)
    coverage: Optional[DataCoverage] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'user_id': self.user_id,
            'name': self.name,
            'working_days': list(self.working_days),
            'entry_map': {day: entry.to_dict() for day, entry in self.entry_map.items()},
            'stats': self.stats.to_dict(),
        }
        if self.coverage:
            result['coverage'] = self.coverage.to_dict()
        return result


@dataclass
class TeamPresenceDay:
    """People physically in office on a day (half-day office counts 0.5)"""
    date: str
    count: float
    total_team: int
    office_users: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ===== REASONING RESULTS =====

@dataclass
class ComparisonResult(WireResult):
    user_a: str
    user_b: str
    stats_a: AttendanceStats
    stats_b: AttendanceStats
    diff: float
    who_has_more: str
    percentage_diff: int
    intent: str = 'comparison'


@dataclass
class TeamAvgComparisonResult(WireResult):
    user_name: str
    user_stats: AttendanceStats
    team_avg_office_percent: int
    team_avg_office_days: float
    peer_count: int
    diff: int
    above_or_below: str
    intent: str = 'team_avg_comparison'


@dataclass
class OverlapResult(WireResult):
    user_a: str
    user_b: str
    total_overlap: float
    full_overlap_days: List[str]
    partial_overlap_days: List[str]
    zero_overlap_days: List[str]
    working_days_count: int
    intent: str = 'overlap'


@dataclass
class MultiPersonOverlapResult(WireResult):
    people: List[str]
    all_in_office_days: List[str]
    working_days_count: int
    intent: str = 'multi_person_coordination'


@dataclass
class DayRecommendation:
    date: str
    day: str
    score: float
    reasons: List[str] = field(default_factory=list)


@dataclass
class OptimizationResult(WireResult):
    """Shared result of optimize / avoid / meeting_plan requests"""
    goal: str
    recommendations: List[DayRecommendation]
    constraints: List[str] = field(default_factory=list)
    avoid_days: List[str] = field(default_factory=list)
    only_days: List[str] = field(default_factory=list)
    intent: str = 'optimize'


@dataclass
class SimulationResult(WireResult):
    target_name: str
    proposed_days: List[str]
    overlap_days: List[str]
    overlap_count: int
    total_proposed: int
    overlap_percent: int
    intent: str = 'simulate'


@dataclass
class TrendResult(WireResult):
    user_name: str
    current: AttendanceStats
    previous: AttendanceStats
    current_label: str
    previous_label: str
    diff: float
    direction: str
    intent: str = 'trend'
