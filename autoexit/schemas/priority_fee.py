from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class PriorityLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    very_high = "veryHigh"


class FeeTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    floor: float = Field(..., description="Minimum fee in microLamports per compute unit")
    multiplier: float = Field(..., description="Multiplier applied to the tier's percentile")


class FeeSchedule(BaseModel):
    model_config = ConfigDict(frozen=True)

    low: FeeTier
    medium: FeeTier
    high: FeeTier
    very_high: FeeTier

    def tier(self, level: PriorityLevel) -> FeeTier:
        return getattr(self, PriorityLevel(level).name)


class PriorityFeeEstimate(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    low: float
    medium: float
    high: float
    very_high: float = Field(..., alias="veryHigh")
    recommended: PriorityLevel
    last_updated: datetime = Field(..., alias="lastUpdated")

    def fee_for(self, level: PriorityLevel) -> float:
        return getattr(self, PriorityLevel(level).name)


class PriorityFeeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    estimate: PriorityFeeEstimate
    compute_units: int = Field(..., alias="computeUnits")
    estimated_tx_fee: Dict[str, int] = Field(..., alias="estimatedTxFee")
    fee_in_sol: Dict[str, str] = Field(..., alias="feeInSol")
