"""
User Model
Team members whose office attendance is tracked
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime


def create_user_model(db):
    """
    Factory function to create User model

    Args:
        db: SQLAlchemy database instance

    Returns:
        User model class
    """

    class User(db.Model):
        __tablename__ = 'users'

        id = Column(Integer, primary_key=True)
        name = Column(String(100), nullable=False)
        email = Column(String(255), nullable=False, unique=True)
        role = Column(String(20), nullable=False, default='member')  # member | admin
        is_active = Column(Boolean, nullable=False, default=True)
        created_at = Column(DateTime, default=datetime.utcnow)

        entries = db.relationship('Entry', backref='user', lazy=True, cascade='all, delete-orphan')

        @property
        def is_admin(self):
            return self.role == 'admin'

        def to_dict(self):
            return {
                'id': self.id,
                'name': self.name,
                'email': self.email,
                'role': self.role,
                'is_active': self.is_active,
            }

        def __repr__(self):
            return f'<User {self.name}>'

    return User
