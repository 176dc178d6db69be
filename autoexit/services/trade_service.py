import logging

import requests

from autoexit.config import EXIT_SLIPPAGE, REQUEST_TIMEOUT
from autoexit.schemas.api_configuration import ApiConfig
from autoexit.schemas.trade import SellResult, TradePayload

logger = logging.getLogger(__name__)


def build_sell_payload(position, reason: str, slippage: float = EXIT_SLIPPAGE) -> TradePayload:
    return TradePayload(
        token_address=position.token_address,
        chain=position.chain,
        action="sell",
        amount=position.amount,
        slippage=slippage,
        reason=reason,
        position_id=position.id,
    )


def execute_sell(position, reason: str, trade_config: ApiConfig, slippage: float = EXIT_SLIPPAGE,
                 timeout: float = REQUEST_TIMEOUT) -> SellResult:
    """
    Sell the whole position through the trade execution API. One attempt
    only, retrying is up to the caller.
    """
    logger.info(f"Executing SELL for {position.token_symbol} - Reason: {reason}")

    payload = build_sell_payload(position, reason, slippage)
    headers = {"Content-Type": "application/json"}
    if trade_config.api_key:
        headers["Authorization"] = f"Bearer {trade_config.api_key}"

    try:
        response = requests.post(
            f"{trade_config.base_url.rstrip('/')}/trade/execute",
            json=payload.model_dump(by_alias=True),
            headers=headers,
            timeout=timeout,
        )
        if not response.ok:
            return SellResult(success=False, error=f"Trade API error: {response.text}")

        result = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Sell execution error for {position.id}: {e}")
        return SellResult(success=False, error=str(e) or "Sell execution failed")

    tx_id = None
    if isinstance(result, dict):
        tx_id = result.get("transactionId") or result.get("txId")
    return SellResult(success=True, tx_id=tx_id or "pending")
