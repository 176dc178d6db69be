import uuid

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, UniqueConstraint, CheckConstraint

from autoexit.database import Base
from autoexit.models.position import utcnow
from autoexit.utils.constants import API_STATUSES, API_TYPES


class ApiConfiguration(Base):
    __tablename__ = "api_configurations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    api_type = Column(String, nullable=False)
    api_name = Column(Text, nullable=False)
    base_url = Column(Text, nullable=False)
    api_key_encrypted = Column(Text, nullable=True)
    is_enabled = Column(Boolean, nullable=False, default=True)
    rate_limit_per_minute = Column(Integer, nullable=False, default=60)
    status = Column(String, nullable=False, default="inactive")
    last_checked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('api_type', 'api_name', name='api_type_name'),
        CheckConstraint(api_type.in_(API_TYPES), name='api_type_known'),
        CheckConstraint(status.in_(API_STATUSES), name='api_status_known'),
    )
