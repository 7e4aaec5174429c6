"""
Profile Model

The application user. Holds login credentials and the profile fields
shown on the dashboard.
"""

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from .base import db, utcnow


class Profile(UserMixin, db.Model):
    """Registered user with hashed password and dietary preferences."""
    __tablename__ = 'profiles'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=True)
    full_name = db.Column(db.String(200), nullable=True)
    dietary_preferences = db.Column(db.JSON, default=list)
    avatar_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'full_name': self.full_name,
            'dietary_preferences': self.dietary_preferences or [],
            'avatar_url': self.avatar_url,
        }

    def __repr__(self):
        return f'<Profile {self.email}>'
