"""
Workbot API Routes
Date tools, pipelines, scheduling reasoning, and plan resolve/apply.

The language-model classifier lives outside this service: its structured
output (tool calls, modifiers, reasoning intents) is the request body.
"""
from flask import Blueprint, current_app, jsonify

from attendance.error_handlers import ValidationException, handle_errors
from attendance.extensions import limiter
from attendance.services import reasoning
from attendance.services.data_retrieval import (
    get_holiday_context,
    get_multiple_user_schedules,
    get_team_presence_by_day,
    get_team_schedules,
    get_user_schedule_data,
)
from attendance.services.date_tool_registry import (
    execute_date_pipeline,
    execute_date_tool,
    execute_date_tools,
    get_modifier_schemas,
    get_tool_schema_prompt,
    get_tool_schemas,
)
from attendance.services.date_tools import parse_iso_date
from attendance.services.schedule_planner import (
    apply_changes,
    resolve_plan,
    validate_actions,
    validate_changes,
)
from attendance.services.working_days import previous_period_range, resolve_period_range
from attendance.utils.request_helpers import get_json_body, get_user_or_404, resolve_today

workbot_bp = Blueprint('workbot', __name__, url_prefix='/api/workbot')

OPTIMIZE_INTENTS = ('optimize', 'avoid', 'meeting_plan')
REASONING_INTENTS = (
    'comparison', 'team_avg_comparison', 'overlap', 'multi_person_coordination',
    'simulate', 'trend',
) + OPTIMIZE_INTENTS


def _apply_rate_limit():
    return current_app.config.get('WORKBOT_APPLY_RATE_LIMIT', '10 per minute')


# ===== DATE TOOLS =====

@workbot_bp.route('/tools', methods=['GET'])
def list_tools():
    """Function schemas for the classifier"""
    return jsonify({
        'success': True,
        'tools': get_tool_schemas(),
        'modifiers': get_modifier_schemas(),
    })


@workbot_bp.route('/tools/prompt', methods=['GET'])
def tool_prompt():
    return jsonify({'success': True, 'prompt': get_tool_schema_prompt()})


@workbot_bp.route('/tools/execute', methods=['POST'])
@handle_errors
def execute_tools():
    """
    Run one tool call ({toolCall}) or several ({toolCalls})

    Tool failures are part of the result (success=false plus error), not
    HTTP errors.
    """
    data = get_json_body()
    today = resolve_today(data.get('today'))

    if 'toolCalls' in data:
        if not isinstance(data['toolCalls'], list):
            raise ValidationException('toolCalls must be an array')
        dates, results = execute_date_tools(data['toolCalls'], today)
        return jsonify({
            'success': any(result.success for result in results),
            'dates': dates,
            'results': [result.to_dict() for result in results],
        })

    if 'toolCall' not in data:
        raise ValidationException('toolCall or toolCalls is required')
    return jsonify(execute_date_tool(data['toolCall'], today).to_dict())


@workbot_bp.route('/pipeline', methods=['POST'])
@handle_errors
def run_pipeline():
    """Generator plus modifiers; exclude_holidays draws on the Holiday table"""
    data = get_json_body()
    today = resolve_today(data.get('today'))
    if 'toolCall' not in data:
        raise ValidationException('toolCall is required')
    modifiers = data.get('modifiers') or []
    if not isinstance(modifiers, list):
        raise ValidationException('modifiers must be an array')

    context = None
    if data.get('includeHolidays', True):
        generated = execute_date_tool(data['toolCall'], today)
        if generated.success:
            context = get_holiday_context(generated.dates)

    result = execute_date_pipeline(data['toolCall'], modifiers, today, context)
    return jsonify(result.to_dict())


# ===== REASONING =====

def _target_users(data, minimum):
    target_ids = data.get('targetUserIds') or []
    if not isinstance(target_ids, list):
        raise ValidationException('targetUserIds must be an array')
    if len(target_ids) < minimum:
        raise ValidationException(f'At least {minimum} targetUserIds required for intent "{data["intent"]}"')
    return [get_user_or_404(user_id) for user_id in target_ids]


def _is_string_list(value):
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _validate_reason_fields(data):
    """Type checks for the optional /reason fields"""
    if data.get('goal') is not None and not isinstance(data['goal'], str):
        raise ValidationException('goal must be a string')

    constraints = data.get('constraints')
    if constraints is not None:
        if not isinstance(constraints, list):
            raise ValidationException('constraints must be an array')
        for index, constraint in enumerate(constraints):
            if isinstance(constraint, str):
                continue
            if not isinstance(constraint, dict):
                raise ValidationException(f'constraints[{index}] must be a string or an object')
            for key in ('avoid_days', 'only_days'):
                if constraint.get(key) is not None and not _is_string_list(constraint[key]):
                    raise ValidationException(f'constraints[{index}].{key} must be an array of day names')

    if data.get('proposedDays') is not None and not _is_string_list(data['proposedDays']):
        raise ValidationException('proposedDays must be an array of day names')

    proposed_dates = data.get('proposedDates')
    if proposed_dates is not None:
        if not _is_string_list(proposed_dates) or any(parse_iso_date(day) is None for day in proposed_dates):
            raise ValidationException('proposedDates must be an array of YYYY-MM-DD strings')


def _reason(intent, data, user, today):
    _validate_reason_fields(data)
    try:
        start, end = resolve_period_range(data.get('period'), today)
    except ValueError as e:
        raise ValidationException(str(e))

    if intent == 'comparison':
        target = _target_users(data, 1)[0]
        subject, other = get_multiple_user_schedules([user, target], start, end)
        return reasoning.compute_comparison(subject, other)

    if intent == 'team_avg_comparison':
        subject = get_user_schedule_data(user, start, end)
        return reasoning.compute_team_avg_comparison(subject, get_team_schedules(start, end))

    if intent == 'overlap':
        target = _target_users(data, 1)[0]
        subject, other = get_multiple_user_schedules([user, target], start, end)
        return reasoning.compute_overlap(subject, other)

    if intent == 'multi_person_coordination':
        targets = _target_users(data, 1)
        return reasoning.compute_multi_person_overlap(
            get_multiple_user_schedules([user] + targets, start, end)
        )

    if intent in OPTIMIZE_INTENTS:
        targets = _target_users(data, 0)
        schedules = get_multiple_user_schedules([user] + targets, start, end)
        required_days = data.get('requiredDays')
        if required_days is not None and (not isinstance(required_days, int) or isinstance(required_days, bool)):
            raise ValidationException('requiredDays must be an integer')
        goal = data.get('goal') or ('meeting_plan' if intent == 'meeting_plan' else '')
        return reasoning.find_optimal_days(
            schedules[0],
            targets=schedules[1:],
            team_presence=get_team_presence_by_day(start, end),
            goal=goal,
            constraints=data.get('constraints') or [],
            required_days=required_days,
            intent=intent,
        )

    if intent == 'simulate':
        target = _target_users(data, 1)[0]
        subject, other = get_multiple_user_schedules([user, target], start, end)
        if data.get('proposedDays'):
            proposed = reasoning.expand_day_of_week_to_date_list(data['proposedDays'], subject.working_days)
        elif isinstance(data.get('proposedDates'), list):
            proposed = data['proposedDates']
        else:
            raise ValidationException('proposedDates or proposedDays is required for intent "simulate"')
        return reasoning.simulate_schedule(proposed, other)

    # trend
    previous_start, previous_end = previous_period_range(start, end)
    current = get_user_schedule_data(user, start, end)
    previous = get_user_schedule_data(user, previous_start, previous_end)
    return reasoning.compute_trend(
        current, previous,
        current_label=f"{start} to {end}",
        previous_label=f"{previous_start} to {previous_end}",
    )


@workbot_bp.route('/reason', methods=['POST'])
@handle_errors
def reason():
    """Answer a classified scheduling question over persisted entries"""
    data = get_json_body()
    intent = data.get('intent')
    if intent not in REASONING_INTENTS:
        raise ValidationException(
            f'intent must be one of {", ".join(REASONING_INTENTS)}', details={'intent': intent}
        )

    user = get_user_or_404(data.get('userId'))
    today = resolve_today(data.get('today'))
    result = _reason(intent, data, user, today)

    current_app.logger.info(f"Workbot reasoning '{intent}' for user {user.id}")
    return jsonify({'success': True, 'data': result.to_dict()})


# ===== PLAN =====

@workbot_bp.route('/resolve', methods=['POST'])
@handle_errors
def resolve():
    """Preview the per-date changes a list of actions would make"""
    data = get_json_body()
    actions = validate_actions(data.get('actions'), current_app.config.get('WORKBOT_MAX_ACTIONS', 50))
    user = get_user_or_404(data.get('userId'))

    plan = resolve_plan(
        user,
        actions,
        resolve_today(data.get('today')),
        is_admin=bool(data.get('isAdmin')),
        window_days=current_app.config.get('MEMBER_EDIT_WINDOW_DAYS', 90),
    )
    return jsonify({'success': True, 'data': plan})


@workbot_bp.route('/apply', methods=['POST'])
@limiter.limit(_apply_rate_limit)
@handle_errors
def apply():
    """Persist reviewed changes"""
    data = get_json_body()
    changes = validate_changes(data.get('changes'), current_app.config.get('WORKBOT_MAX_CHANGES', 100))
    user = get_user_or_404(data.get('userId'))

    outcome = apply_changes(
        user,
        changes,
        resolve_today(data.get('today')),
        is_admin=bool(data.get('isAdmin')),
        window_days=current_app.config.get('MEMBER_EDIT_WINDOW_DAYS', 90),
    )
    return jsonify({'success': True, 'data': outcome})
