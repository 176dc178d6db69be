from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from autoexit.models.position import ExitReason


class ExitAction(str, Enum):
    hold = "hold"
    take_profit = "take_profit"
    stop_loss = "stop_loss"


class ExitEvaluation(BaseModel):
    should_exit: bool
    reason: Optional[ExitReason] = None
    profit_loss_percent: float

    @property
    def action(self) -> ExitAction:
        return ExitAction(self.reason.value) if self.reason else ExitAction.hold


class PositionPriceUpdate(BaseModel):
    """
    The derived fields of a position for one observed price. They are always
    written together so value, price and P&L never disagree in storage.
    """
    current_price: float
    current_value: float
    profit_loss_percent: float
    profit_loss_value: float


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MonitorRequest(CamelModel):
    position_ids: Optional[List[str]] = None
    execute_exits: bool = False


class ExitResult(CamelModel):
    position_id: str
    symbol: str
    action: ExitAction
    current_price: float
    profit_loss_percent: float
    executed: bool = False
    tx_id: Optional[str] = None
    error: Optional[str] = None


class MonitorSummary(CamelModel):
    total: int = 0
    holding: int = 0
    take_profit_triggered: int = 0
    stop_loss_triggered: int = 0
    executed: int = 0

    @classmethod
    def from_results(cls, results: List[ExitResult]):
        return cls(
            total=len(results),
            holding=sum(1 for r in results if r.action == ExitAction.hold),
            take_profit_triggered=sum(1 for r in results if r.action == ExitAction.take_profit),
            stop_loss_triggered=sum(1 for r in results if r.action == ExitAction.stop_loss),
            executed=sum(1 for r in results if r.executed),
        )


class MonitorResponse(CamelModel):
    results: List[ExitResult] = Field(default_factory=list)
    summary: MonitorSummary = Field(default_factory=MonitorSummary)
    message: Optional[str] = None
    timestamp: str
