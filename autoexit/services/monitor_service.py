import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from termcolor import colored

from autoexit.config import EXIT_LOCK_TTL
from autoexit.models.position import Position
from autoexit.schemas.api_configuration import ApiConfig
from autoexit.schemas.monitor import (
    ExitAction,
    ExitResult,
    MonitorResponse,
    MonitorSummary,
    PositionPriceUpdate,
)
from autoexit.services.api_config_service import find_api_config, get_enabled_api_configs
from autoexit.services.exceptions import NoApiConfigurationError
from autoexit.services.exit_service import calculate_price_update, check_exit_conditions
from autoexit.services.position_service import (
    claim_position,
    close_position,
    get_open_positions,
    release_position,
    update_position_prices,
)
from autoexit.services.price_service import PriceOracle
from autoexit.services.trade_service import execute_sell
from autoexit.utils.constants import ERROR_QUEUE_NAME
from autoexit.utils.redis_manager import acquire_exit_lock, push_to_redis_queue, release_exit_lock

logger = logging.getLogger(__name__)

PRICE_NOT_FOUND = "Could not fetch current price"
EXIT_IN_PROGRESS = "Position is already being exited"
NO_TRADE_API = "Trade execution API not configured"


def report_error(message: str):
    logger.error(message)
    push_to_redis_queue(data=f"**Auto Exit** {message}", queue_name=ERROR_QUEUE_NAME)


def hold_result(position: Position, error: str = None) -> ExitResult:
    """
    Result for a position that couldn't be evaluated this cycle, it keeps the
    last stored price and P&L
    """
    return ExitResult(
        position_id=position.id,
        symbol=position.token_symbol,
        action=ExitAction.hold,
        current_price=position.current_price,
        profit_loss_percent=position.profit_loss_percent or 0.0,
        executed=False,
        error=error,
    )


def execute_exit(db: Session, position: Position, reason: str, trade_config: ApiConfig,
                 price_update: PositionPriceUpdate, lock_ttl: int = EXIT_LOCK_TTL) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Sell a position and close it. Returns (executed, tx_id, error).

    The sell only happens while holding the position's exit lock and after
    claiming the row open -> pending. A sell that did not go through puts the
    row back to open. Once the sell went through the row never returns to
    open, so a failed close leaves it pending and it is not sold again.
    """
    try:
        lock_token = acquire_exit_lock(position.id, lock_ttl)
    except redis.RedisError as e:
        return False, None, f"Could not acquire exit lock: {e}"

    if lock_token is None:
        logger.info(f"Exit lock for {position.id} is held by another worker")
        return False, None, EXIT_IN_PROGRESS

    try:
        if not claim_position(db, position.id):
            return False, None, EXIT_IN_PROGRESS

        sell_result = execute_sell(position, reason, trade_config)
        if not sell_result.success:
            report_error(f"Sell failed for {position.token_symbol} ({position.id}) - {sell_result.error}")
            release_position(db, position.id)
            return False, sell_result.tx_id, sell_result.error

        try:
            closed = close_position(db, position.id, reason, sell_result.tx_id, price_update)
        except SQLAlchemyError as e:
            db.rollback()
            report_error(f"Sold {position.token_symbol} ({position.id}) tx {sell_result.tx_id} but could not close it, "
                         f"left pending - {e}")
            return True, sell_result.tx_id, f"Sold but failed to record exit: {e}"

        if not closed:
            report_error(f"Sold {position.token_symbol} ({position.id}) tx {sell_result.tx_id} but it was no longer pending")
        return True, sell_result.tx_id, None
    finally:
        release_exit_lock(position.id, lock_token)


def monitor_position(db: Session, position: Position, price_oracle: PriceOracle, trade_config: Optional[ApiConfig],
                     execute_exits: bool = False) -> Tuple[ExitResult, Optional[PositionPriceUpdate]]:
    """
    Monitor a single open position

    Returns the result record and the price update to persist in the second
    pass, None when there is nothing to write
    """
    sample, evaluation = None, None
    try:
        sample = price_oracle.fetch_price(position.token_address, position.chain)
        if sample is None:
            return hold_result(position, error=PRICE_NOT_FOUND), None

        evaluation = check_exit_conditions(position, sample.price)
        price_update = calculate_price_update(position, sample.price, evaluation.profit_loss_percent)

        if not evaluation.should_exit:
            return ExitResult(
                position_id=position.id,
                symbol=position.token_symbol,
                action=ExitAction.hold,
                current_price=sample.price,
                profit_loss_percent=evaluation.profit_loss_percent,
                executed=False,
            ), price_update

        reason = evaluation.reason.value
        logger.info(colored(
            f"Exit triggered for {position.token_symbol}: {reason} at {evaluation.profit_loss_percent:.2f}%", "magenta"
        ))

        executed, tx_id, error = False, None, None
        if execute_exits:
            if trade_config is None:
                error = NO_TRADE_API
            else:
                executed, tx_id, error = execute_exit(db, position, reason, trade_config, price_update)

        result = ExitResult(
            position_id=position.id,
            symbol=position.token_symbol,
            action=evaluation.action,
            current_price=sample.price,
            profit_loss_percent=evaluation.profit_loss_percent,
            executed=executed,
            tx_id=tx_id,
            error=error,
        )
        # an executed exit already wrote its price fields with the close
        return result, None if executed else price_update

    except Exception as e:
        db.rollback()
        report_error(f"While monitoring position {position.token_symbol} ({position.id}) - {e}")
        if evaluation is None:
            return hold_result(position, error=str(e)), None
        # the exit was triggered even though acting on it failed
        return ExitResult(
            position_id=position.id,
            symbol=position.token_symbol,
            action=evaluation.action,
            current_price=sample.price,
            profit_loss_percent=evaluation.profit_loss_percent,
            executed=False,
            error=str(e),
        ), None


def apply_price_updates(db: Session, price_updates: List[Tuple[str, PositionPriceUpdate]]) -> int:
    """
    Second pass: persist the staged updates, one commit per position
    """
    applied = 0
    for position_id, price_update in price_updates:
        try:
            if update_position_prices(db, position_id, price_update):
                applied += 1
        except SQLAlchemyError as e:
            db.rollback()
            report_error(f"While updating prices of position {position_id} - {e}")
    return applied


def monitor_positions(db: Session, user_id: str, position_ids: Optional[List[str]] = None,
                      execute_exits: bool = False, api_configs: Optional[List[ApiConfig]] = None) -> MonitorResponse:
    """
    Run one monitoring cycle over a user's open positions
    """
    if api_configs is None:
        api_configs = get_enabled_api_configs(db)
    if not api_configs:
        raise NoApiConfigurationError("No API configurations found")

    positions = get_open_positions(db, user_id, position_ids)
    if not positions:
        return MonitorResponse(
            results=[],
            summary=MonitorSummary(),
            message="No open positions to monitor",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    price_oracle = PriceOracle(api_configs)
    trade_config = find_api_config(api_configs, "trade_execution")

    results: List[ExitResult] = []
    price_updates: List[Tuple[str, PositionPriceUpdate]] = []

    for position in positions:
        logger.info(f"Processing position {position.id} {position.token_symbol}: TP {position.profit_take_percent} SL {position.stop_loss_percent}")
        result, price_update = monitor_position(db, position, price_oracle, trade_config, execute_exits)
        results.append(result)
        if price_update is not None:
            price_updates.append((position.id, price_update))

    apply_price_updates(db, price_updates)

    summary = MonitorSummary.from_results(results)
    logger.info(f"Auto-exit: Checked {summary.total} positions, "
                f"{summary.take_profit_triggered + summary.stop_loss_triggered} exits triggered, "
                f"{summary.executed} executed")

    return MonitorResponse(
        results=results,
        summary=summary,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
