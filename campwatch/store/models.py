"""
SQLAlchemy ORM models
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column is stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class WatchRow(Base):
    """
    One campsite watch: an owner asking to hear when a campsite opens up
    for a date range.
    """
    __tablename__ = 'reservations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=True)
    email_address = Column(String, nullable=False, index=True)
    campsite_id = Column(String, nullable=False)
    campsite_name = Column(String, nullable=False)
    campsite_number = Column(String, nullable=False)
    facility_id = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    monitoring_active = Column(Boolean, nullable=False, default=False)
    attempts_made = Column(Integer, nullable=False, default=0)
    success_sent = Column(Integer, nullable=False, default=0)
    last_success_sent_at = Column(DateTime, nullable=True)
    user_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
