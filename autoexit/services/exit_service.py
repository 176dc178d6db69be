from autoexit.models.position import ExitReason
from autoexit.schemas.monitor import ExitEvaluation, PositionPriceUpdate


def calculate_profit_loss_percent(entry_price: float, current_price: float) -> float:
    if not entry_price or entry_price <= 0:
        raise ValueError(f"Entry price must be positive, got {entry_price}")
    return ((current_price - entry_price) / entry_price) * 100


def check_take_profit(take_profit, profit_loss) -> bool:
    """
    Position should be closed once it reaches the configured profit
    """
    return profit_loss >= take_profit


def check_stop_loss(stop_loss, profit_loss) -> bool:
    """
    Position should be closed once it reaches the configured loss,
    stop_loss is a positive percentage
    """
    return profit_loss <= -stop_loss


def check_exit_conditions(position, current_price: float) -> ExitEvaluation:
    """
    Decide whether a position should exit at current_price using the
    position's own thresholds. Take profit wins over stop loss and both
    comparisons are inclusive.
    """
    profit_loss_percent = calculate_profit_loss_percent(position.entry_price, current_price)

    if check_take_profit(position.profit_take_percent, profit_loss_percent):
        return ExitEvaluation(should_exit=True, reason=ExitReason.take_profit,
                              profit_loss_percent=profit_loss_percent)

    if check_stop_loss(position.stop_loss_percent, profit_loss_percent):
        return ExitEvaluation(should_exit=True, reason=ExitReason.stop_loss,
                              profit_loss_percent=profit_loss_percent)

    return ExitEvaluation(should_exit=False, reason=None, profit_loss_percent=profit_loss_percent)


def calculate_price_update(position, current_price: float, profit_loss_percent: float = None) -> PositionPriceUpdate:
    if profit_loss_percent is None:
        profit_loss_percent = calculate_profit_loss_percent(position.entry_price, current_price)
    current_value = position.amount * current_price
    return PositionPriceUpdate(
        current_price=current_price,
        current_value=current_value,
        profit_loss_percent=profit_loss_percent,
        profit_loss_value=current_value - position.entry_value,
    )
