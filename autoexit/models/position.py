import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, String, Float, DateTime, Text

from autoexit.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class PositionStatus(str, Enum):
    open = "open"
    closed = "closed"
    pending = "pending"


class ExitReason(str, Enum):
    take_profit = "take_profit"
    stop_loss = "stop_loss"


class Position(Base):
    __tablename__ = "positions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    token_address = Column(String, nullable=False)
    token_symbol = Column(String, nullable=False)
    token_name = Column(String, nullable=False)
    chain = Column(String, nullable=False, default="solana")
    entry_price = Column(Float, nullable=False)
    current_price = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)
    entry_value = Column(Float, nullable=False)
    current_value = Column(Float, nullable=False)
    profit_loss_percent = Column(Float, default=0.0)
    profit_loss_value = Column(Float, default=0.0)
    profit_take_percent = Column(Float, nullable=False)
    stop_loss_percent = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=PositionStatus.open.value, index=True)
    exit_reason = Column(Text, nullable=True)
    exit_price = Column(Float, nullable=True)
    exit_tx_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=True)
