import logging
import math
from typing import List, Sequence

import requests

from autoexit.config import REQUEST_TIMEOUT
from autoexit.services.exceptions import RpcError, RpcRateLimitedError
from autoexit.utils.constants import FALLBACK_RPCS, RPC_RATE_LIMIT_CODE, RPC_RATE_LIMIT_MESSAGE

logger = logging.getLogger(__name__)

ALL_RATE_LIMITED = "All RPCs rate limited"


def is_rate_limit_error(error) -> bool:
    if not isinstance(error, dict):
        return False
    message = error.get("message") or ""
    return error.get("code") == RPC_RATE_LIMIT_CODE or RPC_RATE_LIMIT_MESSAGE in str(message)


def rpc_request(rpc_url: str, method: str, params: list = None, timeout: float = REQUEST_TIMEOUT):
    """
    Make a single JSON-RPC call and return its result
    """
    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
    }
    if params is not None:
        payload["params"] = params

    try:
        response = requests.post(rpc_url, json=payload, headers={"Content-Type": "application/json"},
                                 timeout=timeout)
    except requests.RequestException as e:
        raise RpcError(str(e)) from e

    if not response.ok:
        message = f"RPC error {response.status_code}: {response.text[:120]}"
        if response.status_code == 429:
            raise RpcRateLimitedError(message)
        raise RpcError(message)

    try:
        data = response.json()
    except ValueError as e:
        raise RpcError(f"RPC returned invalid JSON: {e}") from e

    error = data.get("error") if isinstance(data, dict) else None
    if error:
        if is_rate_limit_error(error):
            raise RpcRateLimitedError("RATE_LIMITED")
        message = error.get("message") if isinstance(error, dict) else None
        raise RpcError(message or "RPC returned an error")

    return data.get("result") if isinstance(data, dict) else None


def build_rpc_candidates(primary_rpc: str, fallback_rpcs: Sequence[str] = FALLBACK_RPCS) -> List[str]:
    return [primary_rpc] + [rpc for rpc in fallback_rpcs if rpc != primary_rpc]


def call_with_fallback(primary_rpc: str, method: str, params: list = None,
                       fallback_rpcs: Sequence[str] = FALLBACK_RPCS, timeout: float = REQUEST_TIMEOUT):
    """
    Try the primary endpoint, then every fallback once, in order. The last
    failure is raised: "All RPCs rate limited" when every endpoint was rate
    limited, otherwise the last endpoint's own message.
    """
    candidates = build_rpc_candidates(primary_rpc, fallback_rpcs)
    only_rate_limited = True

    for index, rpc_url in enumerate(candidates):
        try:
            return rpc_request(rpc_url, method, params, timeout=timeout)
        except RpcError as e:
            only_rate_limited = only_rate_limited and isinstance(e, RpcRateLimitedError)
            logger.warning(f"RPC {index + 1}/{len(candidates)} failed ({method}): {e}")

            if index == len(candidates) - 1:
                if only_rate_limited:
                    raise RpcRateLimitedError(ALL_RATE_LIMITED) from e
                raise RpcError(str(e)) from e


def parse_lamports(result) -> int:
    """
    Lamports from a getBalance result. Integers and digit strings are kept
    exact, anything else goes through float.
    """
    value = result.get("value") if isinstance(result, dict) else None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    try:
        lamports = float(value if value is not None else 0)
    except (TypeError, ValueError):
        return 0
    return int(lamports) if math.isfinite(lamports) else 0


def get_balance_lamports(rpc_url: str, public_key: str, timeout: float = REQUEST_TIMEOUT) -> int:
    return parse_lamports(rpc_request(rpc_url, "getBalance", [public_key], timeout=timeout))


def get_balance_with_fallback(primary_rpc: str, public_key: str, fallback_rpcs: Sequence[str] = FALLBACK_RPCS,
                              timeout: float = REQUEST_TIMEOUT) -> int:
    result = call_with_fallback(primary_rpc, "getBalance", [public_key], fallback_rpcs, timeout=timeout)
    return parse_lamports(result)


def get_recent_prioritization_fees(primary_rpc: str, fallback_rpcs: Sequence[str] = FALLBACK_RPCS,
                                   timeout: float = REQUEST_TIMEOUT) -> List[float]:
    """
    Per slot prioritization fees (microLamports per compute unit) from the
    most recent blocks
    """
    result = call_with_fallback(primary_rpc, "getRecentPrioritizationFees", [], fallback_rpcs, timeout=timeout)
    if not isinstance(result, list):
        raise RpcError("Unexpected getRecentPrioritizationFees result")
    return [item.get("prioritizationFee") for item in result if isinstance(item, dict)]
