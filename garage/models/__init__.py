"""
SQLAlchemy database models.
"""
from garage.models.entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
