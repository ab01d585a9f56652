"""
Entry Model
One user's attendance status for one calendar day. A missing row means the
user worked from home.
"""
import re
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey

from attendance.services.schedule_types import (
    EntryData,
    EntryStatus,
    HalfDayPortion,
    LeaveDuration,
    WorkingPortion,
)

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
NOTE_MAX_LENGTH = 500


def validate_entry_fields(status, leave_duration=None, half_day_portion=None,
                          working_portion=None, start_time=None, end_time=None, note=None):
    """
    Cross-field validation for an entry

    Returns:
        list of error messages, empty when valid
    """
    errors = []
    statuses = [s.value for s in EntryStatus]
    if status not in statuses:
        errors.append(f"status must be one of {statuses}")
    if leave_duration is not None and leave_duration not in [d.value for d in LeaveDuration]:
        errors.append('leaveDuration must be "full" or "half"')
    if half_day_portion is not None and half_day_portion not in [p.value for p in HalfDayPortion]:
        errors.append('halfDayPortion must be "first-half" or "second-half"')
    if working_portion is not None and working_portion not in [p.value for p in WorkingPortion]:
        errors.append('workingPortion must be "wfh" or "office"')

    if leave_duration and status != EntryStatus.LEAVE.value:
        errors.append('leaveDuration is only allowed when status is "leave"')
    if half_day_portion and leave_duration != LeaveDuration.HALF.value:
        errors.append('halfDayPortion is only allowed when leaveDuration is "half"')
    if working_portion and leave_duration != LeaveDuration.HALF.value:
        errors.append('workingPortion is only allowed when leaveDuration is "half"')
    if leave_duration == LeaveDuration.HALF.value and not half_day_portion:
        errors.append('halfDayPortion is required when leaveDuration is "half"')

    for label, value in (('startTime', start_time), ('endTime', end_time)):
        if value and not TIME_RE.match(value):
            errors.append(f'{label} must be in HH:mm 24-hour format')
    if start_time and end_time and TIME_RE.match(start_time) and TIME_RE.match(end_time) and start_time >= end_time:
        errors.append('startTime must be before endTime')

    if note and len(note) > NOTE_MAX_LENGTH:
        errors.append(f'Note cannot exceed {NOTE_MAX_LENGTH} characters')
    return errors


def create_entry_model(db):
    """
    Factory function to create Entry model

    Args:
        db: SQLAlchemy database instance

    Returns:
        Entry model class
    """

    class Entry(db.Model):
        __tablename__ = 'entries'

        id = Column(Integer, primary_key=True)
        user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
        date = Column(Date, nullable=False)
        status = Column(String(10), nullable=False)  # office | leave
        leave_duration = Column(String(10), nullable=True)
        half_day_portion = Column(String(20), nullable=True)
        working_portion = Column(String(10), nullable=True)
        start_time = Column(String(5), nullable=True)  # HH:mm
        end_time = Column(String(5), nullable=True)
        note = Column(String(NOTE_MAX_LENGTH), nullable=True)
        created_at = Column(DateTime, default=datetime.utcnow)
        updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('user_id', 'date', name='uq_entry_user_date'),
            db.Index('idx_entries_date', 'date'),
        )

        def validate_fields(self):
            return validate_entry_fields(
                self.status, self.leave_duration, self.half_day_portion,
                self.working_portion, self.start_time, self.end_time, self.note,
            )

        def to_entry_data(self):
            """Detached snapshot used by the reasoning layer"""
            return EntryData(
                status=self.status,
                leave_duration=self.leave_duration,
                half_day_portion=self.half_day_portion,
                working_portion=self.working_portion,
                start_time=self.start_time,
                end_time=self.end_time,
                note=self.note,
            )

        def to_dict(self):
            return {
                'id': self.id,
                'user_id': self.user_id,
                'date': self.date.isoformat() if self.date else None,
                'status': self.status,
                'leave_duration': self.leave_duration,
                'half_day_portion': self.half_day_portion,
                'working_portion': self.working_portion,
                'start_time': self.start_time,
                'end_time': self.end_time,
                'note': self.note,
                'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            }

        def __repr__(self):
            return f'<Entry user={self.user_id} {self.date} {self.status}>'

    return Entry
