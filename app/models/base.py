# app/models/base.py
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Client-side timestamp default (microsecond resolution on every backend)"""
    return datetime.now(timezone.utc)
