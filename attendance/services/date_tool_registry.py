"""
Date Tool Registry

Parameter schemas, validation and dispatch for the date generators, plus
the pipeline executor (generator followed by modifiers) and the schemas
handed to the language-model classifier.

The classifier only ever *selects* a tool and fills its parameters; every
date is computed here, deterministically, from the supplied ``today``.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from attendance.services import date_tools
from attendance.services.date_modifiers import apply_modifiers
from attendance.services.date_tools import DAY_NAMES, PERIODS, parse_iso_date
from attendance.services.date_types import (
    DateModifier,
    DatePipelineResult,
    DateTool,
    DateToolCall,
    DateToolResult,
    ModifierType,
    ParamValidationError,
    UnknownToolError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParamSpec:
    """Expected shape of one tool parameter"""
    type: str
    enum: Optional[Tuple[str, ...]] = None
    element_type: Optional[str] = None
    required: bool = True
    description: str = ''


PERIOD = ParamSpec('string', enum=PERIODS, description='Which month: this_month or next_month')
POSITION = ParamSpec('string', enum=('first', 'last'), description='Take from the start or the end')
COUNT = ParamSpec('number', description='How many to take')
START_DAY = ParamSpec('number', description='First day of month in the range (inclusive)')
END_DAY = ParamSpec('number', description='Last day of month in the range (inclusive)')
HALF = ParamSpec('string', enum=('first', 'second'), description='first = days 1-15, second = days 16-end')
ALTERNATE_TYPE = ParamSpec(
    'string', enum=('calendar', 'working'),
    description='calendar = every 2nd calendar date kept if a weekday; working = every 2nd weekday',
)
DAY_NAME = ParamSpec('string', enum=tuple(DAY_NAMES), description='Lowercase weekday name')
DAY_LIST = ParamSpec('array', element_type='string', description='Lowercase weekday names')
OCCURRENCE = ParamSpec('number', description='1 = first, 2 = second, -1 = last, -2 = second-last')

TOOL_PARAM_SCHEMAS: Dict[DateTool, Dict[str, ParamSpec]] = {
    DateTool.RESOLVE_DATES: {
        'dates': ParamSpec('array', element_type='string',
                           description='YYYY-MM-DD, today, tomorrow, next <weekday>, this <weekday>'),
    },
    DateTool.EXPAND_MONTH: {'period': PERIOD},
    DateTool.EXPAND_WEEKS: {'period': PERIOD, 'count': COUNT, 'position': POSITION},
    DateTool.EXPAND_WORKING_DAYS: {'period': PERIOD, 'count': COUNT, 'position': POSITION},
    DateTool.EXPAND_DAY_OF_WEEK: {'period': PERIOD, 'day': DAY_NAME},
    DateTool.EXPAND_MULTIPLE_DAYS_OF_WEEK: {'period': PERIOD, 'days': DAY_LIST},
    DateTool.EXPAND_RANGE: {'period': PERIOD, 'start_day': START_DAY, 'end_day': END_DAY},
    DateTool.EXPAND_ALTERNATE: {'period': PERIOD, 'type': ALTERNATE_TYPE},
    DateTool.EXPAND_HALF_MONTH: {'period': PERIOD, 'half': HALF},
    DateTool.EXPAND_EXCEPT: {'period': PERIOD, 'exclude_day': DAY_NAME},
    DateTool.EXPAND_FIRST_WEEKDAY_PER_WEEK: {'period': PERIOD},
    DateTool.EXPAND_LAST_WEEKDAY_PER_WEEK: {'period': PERIOD},
    DateTool.EXPAND_EVERY_NTH: {
        'period': PERIOD,
        'n': ParamSpec('number', description='Stride in calendar days'),
        'start_day': ParamSpec('number', required=False, description='Day to start from (default 1)'),
    },
    DateTool.EXPAND_WEEK_PERIOD: {
        'week': ParamSpec('string', enum=('this_week', 'next_week'), description='Which Monday-Friday week'),
    },
    DateTool.EXPAND_REST_OF_MONTH: {},
    DateTool.EXPAND_SPECIFIC_WEEKS: {
        'period': PERIOD,
        'weeks': ParamSpec('array', element_type='number',
                           description='Week numbers; week 1 = days 1-7, -1 = last 7 days'),
    },
    DateTool.EXPAND_WEEKENDS: {'period': PERIOD},
    DateTool.EXPAND_ALL_DAYS: {'period': PERIOD},
    DateTool.EXPAND_ANCHOR_RANGE: {
        'period': PERIOD,
        'anchor_day': DAY_NAME,
        'anchor_occurrence': OCCURRENCE,
        'direction': ParamSpec(
            'string', enum=('on_and_after', 'on_and_before', 'after', 'before', 'between'),
            description='Which side of the anchor to keep',
        ),
        'end_day': ParamSpec('string', enum=tuple(DAY_NAMES), required=False,
                             description='Second anchor weekday (between only)'),
        'end_occurrence': ParamSpec('number', required=False,
                                    description='Second anchor occurrence (between only)'),
    },
    DateTool.EXPAND_HALF_EXCEPT_DAY: {'period': PERIOD, 'half': HALF, 'exclude_day': DAY_NAME},
    DateTool.EXPAND_RANGE_EXCEPT_DAYS: {
        'period': PERIOD, 'start_day': START_DAY, 'end_day': END_DAY, 'exclude_days': DAY_LIST,
    },
    DateTool.EXPAND_RANGE_DAYS_OF_WEEK: {
        'period': PERIOD, 'start_day': START_DAY, 'end_day': END_DAY, 'days': DAY_LIST,
    },
    DateTool.EXPAND_N_WORKING_DAYS_EXCEPT: {
        'period': PERIOD, 'count': COUNT, 'position': POSITION, 'exclude_days': DAY_LIST,
    },
    DateTool.EXPAND_ORDINAL_DAY_OF_WEEK: {
        'period': PERIOD,
        'ordinals': ParamSpec('array', description='List of {"ordinal": <number>, "day": <weekday>}'),
    },
    DateTool.EXPAND_MONTH_EXCEPT_WEEKS: {
        'period': PERIOD,
        'exclude_weeks': ParamSpec('array', element_type='number',
                                   description='Week numbers to drop; -1 = last 7 days'),
    },
    DateTool.EXPAND_MONTH_EXCEPT_RANGE: {
        'period': PERIOD,
        'exclude_start': ParamSpec('number', description='First excluded day of month'),
        'exclude_end': ParamSpec('number', description='Last excluded day of month'),
    },
    DateTool.EXPAND_RANGE_ALTERNATE: {
        'period': PERIOD, 'start_day': START_DAY, 'end_day': END_DAY, 'type': ALTERNATE_TYPE,
    },
    DateTool.EXPAND_N_DAYS_FROM_ORDINAL: {
        'period': PERIOD, 'ordinal': OCCURRENCE, 'day': DAY_NAME, 'count': COUNT,
    },
}

TOOL_DESCRIPTIONS: Dict[DateTool, str] = {
    DateTool.RESOLVE_DATES: 'Individual dates: "2026-03-05", "today", "tomorrow", "next Monday", "this Friday"',
    DateTool.EXPAND_MONTH: 'Every weekday of a month: "every weekday next month"',
    DateTool.EXPAND_WEEKS: 'Weekdays of the first/last N weeks: "first 2 weeks of next month"',
    DateTool.EXPAND_WORKING_DAYS: 'First/last N weekdays: "first 10 working days of next month"',
    DateTool.EXPAND_DAY_OF_WEEK: 'Every occurrence of one day: "every Monday next month"',
    DateTool.EXPAND_MULTIPLE_DAYS_OF_WEEK: 'Every occurrence of several days: "Mondays and Wednesdays"',
    DateTool.EXPAND_RANGE: 'Weekdays in a day range: "5th to 20th of next month"',
    DateTool.EXPAND_ALTERNATE: 'Alternate days across the month: "every other working day"',
    DateTool.EXPAND_HALF_MONTH: 'Weekdays of the first (1-15) or second (16-end) half',
    DateTool.EXPAND_EXCEPT: 'Month weekdays except one day: "every weekday except Fridays"',
    DateTool.EXPAND_FIRST_WEEKDAY_PER_WEEK: 'First weekday of each week',
    DateTool.EXPAND_LAST_WEEKDAY_PER_WEEK: 'Last weekday of each week',
    DateTool.EXPAND_EVERY_NTH: 'Every Nth calendar day kept if a weekday: "every 3rd day", "even dates"',
    DateTool.EXPAND_WEEK_PERIOD: 'Monday-Friday of this week or next week',
    DateTool.EXPAND_REST_OF_MONTH: 'Weekdays from tomorrow to the end of this month',
    DateTool.EXPAND_SPECIFIC_WEEKS: 'Weekdays of numbered weeks: "second week", "weeks 2 and 4"',
    DateTool.EXPAND_WEEKENDS: 'Saturdays and Sundays only',
    DateTool.EXPAND_ALL_DAYS: 'Every calendar day including weekends',
    DateTool.EXPAND_ANCHOR_RANGE: 'Weekdays relative to an ordinal weekday: "after the first Monday"',
    DateTool.EXPAND_HALF_EXCEPT_DAY: 'Half month except one day: "first half except Fridays"',
    DateTool.EXPAND_RANGE_EXCEPT_DAYS: 'Day range except some days: "days 1-21 except Mondays"',
    DateTool.EXPAND_RANGE_DAYS_OF_WEEK: 'Some days inside a range: "Mon-Wed in days 1-14"',
    DateTool.EXPAND_N_WORKING_DAYS_EXCEPT: 'First/last N working days except some days',
    DateTool.EXPAND_ORDINAL_DAY_OF_WEEK: 'Specific ordinal weekdays: "first Monday and last Friday"',
    DateTool.EXPAND_MONTH_EXCEPT_WEEKS: 'Month weekdays except numbered weeks: "except the last week"',
    DateTool.EXPAND_MONTH_EXCEPT_RANGE: 'Month weekdays except a day range: "except the 10th to 15th"',
    DateTool.EXPAND_RANGE_ALTERNATE: 'Alternate days inside a day range',
    DateTool.EXPAND_N_DAYS_FROM_ORDINAL: 'N working days from an ordinal weekday: "5 days from the 2nd Monday"',
}

MODIFIER_PARAM_SCHEMAS: Dict[ModifierType, Dict[str, ParamSpec]] = {
    ModifierType.EXCLUDE_DATES: {'dates': ParamSpec('array', element_type='string', description='YYYY-MM-DD dates')},
    ModifierType.EXCLUDE_DAYS_OF_WEEK: {'days': DAY_LIST},
    ModifierType.EXCLUDE_RANGE: {'start_day': START_DAY, 'end_day': END_DAY},
    ModifierType.EXCLUDE_WEEKS: {
        'weeks': ParamSpec('array', element_type='number', description='Calendar weeks; week 1 = days 1-7'),
    },
    ModifierType.EXCLUDE_WORKING_DAYS_COUNT: {'count': COUNT, 'position': POSITION},
    ModifierType.EXCLUDE_HOLIDAYS: {
        'dates': ParamSpec('array', element_type='string', required=False,
                           description='Omit to use the holidays supplied by the system'),
    },
    ModifierType.FILTER_DAYS_OF_WEEK: {'days': DAY_LIST},
    ModifierType.FILTER_RANGE: {'start_day': START_DAY, 'end_day': END_DAY},
    ModifierType.FILTER_WEEKDAY_SLICE: {'count': COUNT, 'position': POSITION},
}

MODIFIER_DESCRIPTIONS: Dict[ModifierType, str] = {
    ModifierType.EXCLUDE_DATES: 'Remove specific dates',
    ModifierType.EXCLUDE_DAYS_OF_WEEK: 'Remove every occurrence of the given weekdays',
    ModifierType.EXCLUDE_RANGE: 'Remove a day-of-month range',
    ModifierType.EXCLUDE_WEEKS: 'Remove calendar weeks (week 1 = days 1-7)',
    ModifierType.EXCLUDE_WORKING_DAYS_COUNT: 'Remove the first/last N weekdays of the current set',
    ModifierType.EXCLUDE_HOLIDAYS: 'Remove holidays',
    ModifierType.FILTER_DAYS_OF_WEEK: 'Keep only the given weekdays',
    ModifierType.FILTER_RANGE: 'Keep only a day-of-month range',
    ModifierType.FILTER_WEEKDAY_SLICE: 'Keep the first/last N dates of each week',
}

TOOL_HANDLERS: Dict[DateTool, Callable[[date, Dict[str, Any]], DateToolResult]] = {
    tool: getattr(date_tools, tool.value) for tool in DateTool
}

for _table, _members, _label in (
    (TOOL_PARAM_SCHEMAS, DateTool, 'param schema'),
    (TOOL_DESCRIPTIONS, DateTool, 'description'),
    (MODIFIER_PARAM_SCHEMAS, ModifierType, 'param schema'),
):
    _missing = set(_members) - set(_table)
    if _missing:
        raise RuntimeError(f"Missing {_label} for: {', '.join(sorted(m.value for m in _missing))}")


# ===== VALIDATION =====

_PY_TYPE_NAMES = {bool: 'boolean', int: 'number', float: 'number', str: 'string', list: 'array', dict: 'object'}


def _type_name(value: Any) -> str:
    return _PY_TYPE_NAMES.get(type(value), type(value).__name__)


def _matches_type(value: Any, expected: str) -> bool:
    if expected == 'number':
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == 'string':
        return isinstance(value, str)
    if expected == 'array':
        return isinstance(value, list)
    if expected == 'object':
        return isinstance(value, dict)
    return False


def validate_tool_params(tool: str, params: Dict[str, Any], spec: Dict[str, ParamSpec]) -> None:
    """
    Check params against a schema before any handler runs

    Args:
        tool: Tool name used in error messages
        params: Parameters from the tool call
        spec: Schema from TOOL_PARAM_SCHEMAS

    Raises:
        ParamValidationError: on a missing required key, a wrong type, a
            wrong array element type or a value outside its enum
    """
    for key, entry in spec.items():
        value = params.get(key)
        if value is None:
            if entry.required:
                raise ParamValidationError(f'{tool}: missing required param "{key}"')
            continue

        if not _matches_type(value, entry.type):
            raise ParamValidationError(
                f'{tool}: param "{key}" must be {entry.type}, got {_type_name(value)}'
            )

        if entry.type == 'array' and entry.element_type:
            for index, item in enumerate(value):
                if not _matches_type(item, entry.element_type):
                    raise ParamValidationError(
                        f'{tool}: param "{key}"[{index}] must be {entry.element_type}, got {_type_name(item)}'
                    )

        if entry.enum and value not in entry.enum:
            raise ParamValidationError(
                f'{tool}: param "{key}" must be one of [{", ".join(entry.enum)}], got "{value}"'
            )


def _coerce_today(today: Union[date, str]) -> date:
    if isinstance(today, date):
        return today
    parsed = parse_iso_date(today)
    if parsed is None:
        raise ParamValidationError(f"Invalid reference date: {today}")
    return parsed


# ===== EXECUTION =====

def execute_date_tool(tool_call: Union[DateToolCall, Dict[str, Any]], today: Union[date, str]) -> DateToolResult:
    """
    Validate and run one generator

    Args:
        tool_call: DateToolCall or its wire form {"tool": ..., "params": {...}}
        today: Reference date (date or YYYY-MM-DD) in the reference timezone

    Returns:
        DateToolResult; this function never raises. Validation problems
        come back verbatim in ``error``, unexpected faults are prefixed
        with "Tool execution error:".
    """
    try:
        if not isinstance(tool_call, DateToolCall):
            tool_call = DateToolCall.from_dict(tool_call)
        today = _coerce_today(today)
        validate_tool_params(tool_call.tool.value, tool_call.params, TOOL_PARAM_SCHEMAS[tool_call.tool])
        return TOOL_HANDLERS[tool_call.tool](today, tool_call.params)

    except (UnknownToolError, ParamValidationError) as e:
        logger.warning(f"Date tool rejected: {str(e)}")
        return DateToolResult.failure(str(e))

    except Exception as e:
        logger.error(f"Date tool execution failed: {str(e)}", exc_info=True)
        return DateToolResult.failure(f"Tool execution error: {str(e)}")


def execute_date_tools(
    tool_calls: Sequence[Union[DateToolCall, Dict[str, Any]]],
    today: Union[date, str],
) -> Tuple[List[str], List[DateToolResult]]:
    """
    Run several generators and union the successful outputs

    Returns:
        (sorted unique dates from successful calls, every individual result)
    """
    merged = set()
    results = []
    for tool_call in tool_calls or []:
        result = execute_date_tool(tool_call, today)
        results.append(result)
        if result.success:
            merged.update(result.dates)
    return sorted(merged), results


def execute_date_pipeline(
    tool_call: Union[DateToolCall, Dict[str, Any]],
    modifiers: Optional[Sequence[Union[DateModifier, Dict[str, Any]]]],
    today: Union[date, str],
    context: Optional[Dict[str, Any]] = None,
) -> DatePipelineResult:
    """
    Generator followed by ordered modifiers

    A failing generator fails the pipeline. Modifier errors never do: the
    offending step is skipped and reported in ``modifier_errors``.

    Args:
        tool_call: Generator call
        modifiers: Optional ordered modifiers
        today: Reference date
        context: Optional {"holidays": [...]} for exclude_holidays
    """
    generated = execute_date_tool(tool_call, today)
    if not generated.success:
        return DatePipelineResult(
            success=False,
            dates=[],
            description=generated.description,
            generator_result=generated,
        )

    if not modifiers:
        return DatePipelineResult(
            success=True,
            dates=list(generated.dates),
            description=generated.description,
            generator_result=generated,
        )

    dates, errors = apply_modifiers(generated.dates, modifiers, context)
    return DatePipelineResult(
        success=True,
        dates=dates,
        description=f"{generated.description} → {len(modifiers)} modifier(s) applied → {len(dates)} dates",
        generator_result=generated,
        modifier_errors=errors,
    )


# ===== SCHEMAS FOR THE CLASSIFIER =====

def _json_schema(spec: Dict[str, ParamSpec]) -> Dict[str, Any]:
    properties = {}
    for key, entry in spec.items():
        prop: Dict[str, Any] = {'type': entry.type}
        if entry.description:
            prop['description'] = entry.description
        if entry.enum:
            prop['enum'] = list(entry.enum)
        if entry.element_type:
            prop['items'] = {'type': entry.element_type}
        properties[key] = prop
    return {
        'type': 'object',
        'properties': properties,
        'required': [key for key, entry in spec.items() if entry.required],
    }


def get_tool_schemas() -> List[Dict[str, Any]]:
    """OpenAI-style function schemas, one per generator"""
    return [
        {
            'type': 'function',
            'function': {
                'name': tool.value,
                'description': TOOL_DESCRIPTIONS[tool],
                'parameters': _json_schema(TOOL_PARAM_SCHEMAS[tool]),
            },
        }
        for tool in DateTool
    ]


def get_modifier_schemas() -> List[Dict[str, Any]]:
    """Schemas for the modifier step types"""
    return [
        {
            'type': modifier.value,
            'description': MODIFIER_DESCRIPTIONS[modifier],
            'parameters': _json_schema(MODIFIER_PARAM_SCHEMAS[modifier]),
        }
        for modifier in ModifierType
    ]


def _format_params(spec: Dict[str, ParamSpec]) -> str:
    if not spec:
        return '{} (no parameters)'
    parts = []
    for key, entry in spec.items():
        if entry.enum:
            shape = ' | '.join(f'"{value}"' for value in entry.enum)
        elif entry.type == 'array':
            shape = f'[<{entry.element_type or "item"}>, ...]'
        else:
            shape = f'<{entry.type}>'
        suffix = '' if entry.required else ' (optional)'
        parts.append(f'"{key}": {shape}{suffix}')
    return '{ ' + ', '.join(parts) + ' }'


COMPOSITION_EXAMPLES = """COMPOSITION EXAMPLES:

"All weekdays next month except Wednesdays and Fridays":
  toolCall: { "tool": "expand_month", "params": { "period": "next_month" } }
  modifiers: [{ "type": "exclude_days_of_week", "params": { "days": ["wednesday", "friday"] } }]

"Monday to Wednesday of each week next month":
  toolCall: { "tool": "expand_month", "params": { "period": "next_month" } }
  modifiers: [{ "type": "filter_days_of_week", "params": { "days": ["monday", "tuesday", "wednesday"] } }]

"Between first Monday and last Friday, except holidays":
  toolCall: { "tool": "expand_anchor_range", "params": { "period": "next_month", "anchor_day": "monday",
              "anchor_occurrence": 1, "direction": "between", "end_day": "friday", "end_occurrence": -1 } }
  modifiers: [{ "type": "exclude_holidays", "params": {} }]

Only add modifiers when a single tool cannot express the command. Prefer a
composite tool (e.g. expand_range_except_days) when it matches exactly."""


def get_tool_schema_prompt() -> str:
    """Plain-text tool catalogue for the classifier's system prompt"""
    lines = ['AVAILABLE DATE TOOLS (GENERATORS):', 'Select one tool per action in a "toolCall" field.', '']
    for number, tool in enumerate(DateTool, start=1):
        lines.append(f'{number}. {tool.value}')
        lines.append(f'   Use for: {TOOL_DESCRIPTIONS[tool]}')
        lines.append(f'   Params: {_format_params(TOOL_PARAM_SCHEMAS[tool])}')
        lines.append('')

    lines.append('MODIFIERS (optional, applied in order after the generator):')
    lines.append('')
    for number, modifier in enumerate(ModifierType, start=1):
        lines.append(f'M{number}. {modifier.value}: {MODIFIER_DESCRIPTIONS[modifier]}')
        lines.append(f'    Params: {_format_params(MODIFIER_PARAM_SCHEMAS[modifier])}')
    lines.append('')
    lines.append(COMPOSITION_EXAMPLES)
    return '\n'.join(lines)
