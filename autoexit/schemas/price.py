from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PriceSample(BaseModel):
    token_address: str = Field(..., description="Token mint / contract address")
    price: float = Field(..., description="Price in USD")
    price_change_24h: Optional[float] = Field(None, description="24h change in percent, when the source reports it")
    source: str = Field(..., description="api_type of the source that answered")
    fetched_at: datetime
