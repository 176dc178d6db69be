from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TradePayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token_address: str
    chain: str
    action: str = "sell"
    amount: float
    slippage: float
    reason: str
    position_id: str


class SellResult(BaseModel):
    success: bool
    tx_id: Optional[str] = None
    error: Optional[str] = None
