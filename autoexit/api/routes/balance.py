from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException

from autoexit.config import SOLANA_RPC_URL
from autoexit.schemas.balance import BalanceRequest, BalanceResponse
from autoexit.services.auth_service import get_current_user
from autoexit.services.exceptions import RpcError
from autoexit.services.rpc_service import get_balance_with_fallback
from autoexit.utils.constants import LAMPORTS_PER_SOL
from autoexit.utils.logging import setup_logging

logger = setup_logging()
router = APIRouter()


@router.post("/", response_model=BalanceResponse)
def get_balance(balance_request: BalanceRequest, user_id: str = Depends(get_current_user)):
    if not balance_request.public_key:
        raise HTTPException(status_code=400, detail="Missing required field: publicKey")

    rpc_host = urlparse(SOLANA_RPC_URL).netloc or SOLANA_RPC_URL[:32]
    logger.info(f"Solana balance user={user_id} rpcHost={rpc_host}")

    try:
        balance_lamports = get_balance_with_fallback(SOLANA_RPC_URL, balance_request.public_key)
    except RpcError as e:
        logger.error(f"Solana balance error: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return BalanceResponse(
        success=True,
        public_key=balance_request.public_key,
        balance_lamports=balance_lamports,
        balance_sol=balance_lamports / LAMPORTS_PER_SOL,
    )
