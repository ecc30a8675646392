# SQLAlchemy models

from datetime import datetime, timezone

from sqlalchemy import Column, String, JSON, ForeignKey, Index

from app.models.base import Base, new_id


def format_timestamp(value: datetime) -> str:
    """Normalize a datetime to the stored UTC form, e.g. 2024-03-01T10:00:00.000Z

    Naive datetimes are taken as UTC. Lexical order of the result matches
    chronological order, which range filters and bucketing rely on.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    # strftime("%Y") does not pad years below 1000
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    org_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False, index=True)
    properties = Column(JSON, nullable=False, default=dict)
    user_identifier = Column(String(255), nullable=True)
    session_id = Column(String(255), nullable=True)
    timestamp = Column(String(32), nullable=False, index=True)

    __table_args__ = (
        # Composite indexes for tenant-scoped query patterns
        Index('idx_events_org_name', 'org_id', 'name'),
        Index('idx_events_org_timestamp', 'org_id', 'timestamp'),
    )
