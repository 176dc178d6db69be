from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.future import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import and_

from autoexit.models.position import Position, PositionStatus
from autoexit.schemas.monitor import PositionPriceUpdate
from autoexit.utils.logging import setup_logging

logger = setup_logging()


def get_open_positions(db: Session, user_id: str, position_ids: Optional[List[str]] = None) -> List[Position]:
    query = select(Position).where(
        and_(
            Position.user_id == user_id,
            Position.status == PositionStatus.open.value,
        )
    )
    if position_ids:
        query = query.where(Position.id.in_(position_ids))

    result = db.execute(query.order_by(Position.created_at))
    positions = result.scalars().all()
    logger.info(f"Retrieved {len(positions)} open positions for user {user_id}")
    return positions


def get_users_with_open_positions(db: Session) -> List[str]:
    result = db.execute(
        select(Position.user_id).where(Position.status == PositionStatus.open.value).distinct()
    )
    return list(result.scalars().all())


def update_position_prices(db: Session, position_id: str, price_update: PositionPriceUpdate) -> bool:
    """
    Write the derived price fields of one open position in a single
    statement. Returns False when the position is no longer open.
    """
    return _transition(db, position_id, PositionStatus.open, **price_update.model_dump())


def _transition(db: Session, position_id: str, from_status: PositionStatus, **values) -> bool:
    """
    Conditional status update, True only when the row was in from_status
    """
    result = db.execute(
        update(Position)
        .where(and_(Position.id == position_id, Position.status == from_status.value))
        .values(**values)
    )
    db.commit()
    return result.rowcount == 1


def claim_position(db: Session, position_id: str) -> bool:
    """
    open -> pending before selling. Only one caller can win the claim, and a
    pending position is neither monitored nor sold again.
    """
    return _transition(db, position_id, PositionStatus.open, status=PositionStatus.pending.value)


def release_position(db: Session, position_id: str) -> bool:
    """
    pending -> open after a sell that did not go through
    """
    return _transition(db, position_id, PositionStatus.pending, status=PositionStatus.open.value)


def close_position(db: Session, position_id: str, exit_reason: str, exit_tx_id: str,
                   price_update: PositionPriceUpdate) -> bool:
    """
    pending -> closed together with the exit fields, so only the claim holder
    can close a position, and only once.
    """
    return _transition(
        db,
        position_id,
        PositionStatus.pending,
        status=PositionStatus.closed.value,
        exit_reason=exit_reason,
        exit_price=price_update.current_price,
        exit_tx_id=exit_tx_id,
        closed_at=datetime.now(timezone.utc),
        **price_update.model_dump(),
    )
