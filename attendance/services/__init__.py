"""
Attendance services

The date engine (date_types, date_tools, date_modifiers, date_tool_registry)
and the reasoning engine (schedule_types, presence, reasoning) are pure and
never touch Flask or the database. data_retrieval and schedule_planner sit
between them and the models.
"""
