"""
Database init - declarative base for the SQL store models
"""

from .base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
