"""
Holiday Model
Organization-wide days off; never counted as working days
"""
from datetime import datetime, date
from sqlalchemy import Column, Integer, String, Date, DateTime


def create_holiday_model(db):
    """
    Factory function to create Holiday model

    Args:
        db: SQLAlchemy database instance

    Returns:
        Holiday model class
    """

    class Holiday(db.Model):
        __tablename__ = 'holidays'

        id = Column(Integer, primary_key=True)
        date = Column(Date, nullable=False, unique=True)
        name = Column(String(100), nullable=False)  # e.g., "Holi", "Diwali"
        created_at = Column(DateTime, default=datetime.utcnow)

        def to_dict(self):
            """Convert to dictionary for JSON serialization"""
            return {
                'id': self.id,
                'date': self.date.isoformat() if self.date else None,
                'name': self.name,
            }

        @classmethod
        def get_holiday_dates(cls, start_date, end_date):
            """
            Holiday dates within an inclusive range

            Args:
                start_date: date or YYYY-MM-DD string
                end_date: date or YYYY-MM-DD string

            Returns:
                set of YYYY-MM-DD strings
            """
            if isinstance(start_date, str):
                start_date = date.fromisoformat(start_date)
            if isinstance(end_date, str):
                end_date = date.fromisoformat(end_date)

            holidays = cls.query.filter(
                cls.date >= start_date,
                cls.date <= end_date
            ).all()
            return {h.date.isoformat() for h in holidays}

        def __repr__(self):
            return f'<Holiday {self.date} {self.name}>'

    return Holiday
