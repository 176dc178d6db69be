from fastapi import APIRouter

from autoexit.config import SOLANA_RPC_URL
from autoexit.schemas.priority_fee import PriorityFeeResponse, PriorityLevel
from autoexit.services.priority_fee_service import priority_fee_estimator
from autoexit.services.rpc_service import get_recent_prioritization_fees
from autoexit.utils.constants import DEFAULT_COMPUTE_UNITS
from autoexit.utils.logging import setup_logging

logger = setup_logging()
router = APIRouter()


@router.get("/", response_model=PriorityFeeResponse)
def get_priority_fees(compute_units: int = DEFAULT_COMPUTE_UNITS):
    estimate = priority_fee_estimator.refresh(lambda: get_recent_prioritization_fees(SOLANA_RPC_URL))

    return PriorityFeeResponse(
        estimate=estimate,
        compute_units=compute_units,
        estimated_tx_fee={
            level.value: priority_fee_estimator.get_estimated_tx_fee(level, compute_units) for level in PriorityLevel
        },
        fee_in_sol={level.value: priority_fee_estimator.get_fee_in_sol(level) for level in PriorityLevel},
    )
