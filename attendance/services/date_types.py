"""
Date tool types and data classes for the Workbot date engine
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DateTool(str, Enum):
    """Date generators the classifier may select"""
    RESOLVE_DATES = "resolve_dates"
    EXPAND_MONTH = "expand_month"
    EXPAND_WEEKS = "expand_weeks"
    EXPAND_WORKING_DAYS = "expand_working_days"
    EXPAND_DAY_OF_WEEK = "expand_day_of_week"
    EXPAND_MULTIPLE_DAYS_OF_WEEK = "expand_multiple_days_of_week"
    EXPAND_RANGE = "expand_range"
    EXPAND_ALTERNATE = "expand_alternate"
    EXPAND_HALF_MONTH = "expand_half_month"
    EXPAND_EXCEPT = "expand_except"
    EXPAND_FIRST_WEEKDAY_PER_WEEK = "expand_first_weekday_per_week"
    EXPAND_LAST_WEEKDAY_PER_WEEK = "expand_last_weekday_per_week"
    EXPAND_EVERY_NTH = "expand_every_nth"
    EXPAND_WEEK_PERIOD = "expand_week_period"
    EXPAND_REST_OF_MONTH = "expand_rest_of_month"
    EXPAND_SPECIFIC_WEEKS = "expand_specific_weeks"
    EXPAND_WEEKENDS = "expand_weekends"
    EXPAND_ALL_DAYS = "expand_all_days"
    EXPAND_ANCHOR_RANGE = "expand_anchor_range"
    EXPAND_HALF_EXCEPT_DAY = "expand_half_except_day"
    EXPAND_RANGE_EXCEPT_DAYS = "expand_range_except_days"
    EXPAND_RANGE_DAYS_OF_WEEK = "expand_range_days_of_week"
    EXPAND_N_WORKING_DAYS_EXCEPT = "expand_n_working_days_except"
    EXPAND_ORDINAL_DAY_OF_WEEK = "expand_ordinal_day_of_week"
    EXPAND_MONTH_EXCEPT_WEEKS = "expand_month_except_weeks"
    EXPAND_MONTH_EXCEPT_RANGE = "expand_month_except_range"
    EXPAND_RANGE_ALTERNATE = "expand_range_alternate"
    EXPAND_N_DAYS_FROM_ORDINAL = "expand_n_days_from_ordinal"


class ModifierType(str, Enum):
    """Set operators applied, in order, to a generator's output"""
    EXCLUDE_DATES = "exclude_dates"
    EXCLUDE_DAYS_OF_WEEK = "exclude_days_of_week"
    EXCLUDE_RANGE = "exclude_range"
    EXCLUDE_WEEKS = "exclude_weeks"
    EXCLUDE_WORKING_DAYS_COUNT = "exclude_working_days_count"
    EXCLUDE_HOLIDAYS = "exclude_holidays"
    FILTER_DAYS_OF_WEEK = "filter_days_of_week"
    FILTER_RANGE = "filter_range"
    FILTER_WEEKDAY_SLICE = "filter_weekday_slice"


class UnknownToolError(ValueError):
    """Raised when a tool call names a tool outside DateTool"""


class UnknownModifierError(ValueError):
    """Raised when a modifier names a type outside ModifierType"""


class ParamValidationError(ValueError):
    """Raised when tool parameters fail their schema"""


@dataclass
class DateToolCall:
    """A single generator invocation: tool name plus its parameters"""
    tool: DateTool
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DateToolCall':
        """
        Build a tool call from its wire form

        Args:
            data: {"tool": <name>, "params": {...}}

        Raises:
            UnknownToolError: tool name is not a DateTool
            ParamValidationError: params is not an object
        """
        if not isinstance(data, dict):
            raise ParamValidationError('toolCall must be an object')

        name = data.get('tool')
        try:
            tool = DateTool(name)
        except ValueError:
            raise UnknownToolError(f"Unknown tool: {name}")

        params = data.get('params')
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ParamValidationError(f"{tool.value}: params must be an object")

        return cls(tool=tool, params=dict(params))

    def to_dict(self) -> Dict[str, Any]:
        return {'tool': self.tool.value, 'params': dict(self.params)}


@dataclass
class DateModifier:
    """One exclude/filter step of a pipeline"""
    type: ModifierType
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DateModifier':
        if not isinstance(data, dict):
            raise ParamValidationError('modifier must be an object')

        name = data.get('type')
        try:
            mod_type = ModifierType(name)
        except ValueError:
            raise UnknownModifierError(f"Unknown modifier type: {name}")

        params = data.get('params')
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ParamValidationError(f"{mod_type.value}: params must be an object")

        return cls(type=mod_type, params=dict(params))

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type.value, 'params': dict(self.params)}


@dataclass
class DateToolResult:
    """Outcome of one generator call"""
    success: bool
    dates: List[str] = field(default_factory=list)
    description: str = ''
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, description: str = '') -> 'DateToolResult':
        return cls(success=False, dates=[], description=description, error=error)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'success': self.success,
            'dates': list(self.dates),
            'description': self.description,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class DatePipelineResult:
    """Generator result plus the post-modifier date set"""
    success: bool
    dates: List[str]
    description: str
    generator_result: DateToolResult
    modifier_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'dates': list(self.dates),
            'description': self.description,
            'generatorResult': self.generator_result.to_dict(),
            'modifierErrors': list(self.modifier_errors),
        }
