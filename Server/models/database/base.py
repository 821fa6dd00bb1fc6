"""
Todo RBAC Server - Database Base

Shared declarative base for all SQLAlchemy models.
All models share the same metadata so relationships resolve by table name.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
