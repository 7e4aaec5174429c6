"""
Database Base Module

Creates the SQLAlchemy database instance that all models inherit from.
This is separate to avoid circular imports.
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

# Create the SQLAlchemy instance
# This will be initialized with the Flask app in app.py
db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, the form SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
