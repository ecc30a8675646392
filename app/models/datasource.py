from sqlalchemy import Column, String, DateTime, JSON, ForeignKey

from app.models.base import Base, new_id, utcnow


class Datasource(Base):
    __tablename__ = "datasources"

    id = Column(String(36), primary_key=True, default=new_id)
    org_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type = Column(String(32), nullable=False)
    name = Column(String(200), nullable=False)
    config = Column(JSON, nullable=False, default=dict)
    status = Column(String(32), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
