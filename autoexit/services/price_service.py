import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

import requests

from autoexit.config import REQUEST_TIMEOUT
from autoexit.schemas.api_configuration import ApiConfig
from autoexit.schemas.price import PriceSample

logger = logging.getLogger(__name__)


def _to_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class PriceSource:
    """
    One external price API. Subclasses describe how to build the request and
    where the price sits in the JSON body, everything else is shared.
    """
    api_type: str = ""
    requires_api_key = False

    def __init__(self, config: ApiConfig, timeout: float = REQUEST_TIMEOUT):
        self.config = config
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    def supports(self, chain: str) -> bool:
        return True

    def build_request(self, token_address: str, chain: str):
        raise NotImplementedError

    def extract_price(self, data):
        """
        Return (price, price_change_24h) from a response body, or None when
        the body doesn't have the expected shape
        """
        raise NotImplementedError

    def fetch_price(self, token_address: str, chain: str) -> Optional[PriceSample]:
        url, headers = self.build_request(token_address, chain)
        response = requests.get(url, headers=headers, timeout=self.timeout)
        if not response.ok:
            logger.warning(f"{self.api_type} price fetch failed for {token_address}: HTTP {response.status_code}")
            return None

        extracted = self.extract_price(response.json())
        if not extracted:
            logger.info(f"{self.api_type} returned no price for {token_address}")
            return None

        price, price_change_24h = extracted
        price = _to_float(price)
        if price is None or price <= 0:
            logger.info(f"{self.api_type} returned an unusable price for {token_address}: {extracted[0]!r}")
            return None

        return PriceSample(
            token_address=token_address,
            price=price,
            price_change_24h=_to_float(price_change_24h),
            source=self.api_type,
            fetched_at=datetime.now(timezone.utc),
        )


class DexScreenerSource(PriceSource):
    api_type = "dexscreener"

    def build_request(self, token_address, chain):
        return f"{self.base_url}/latest/dex/tokens/{token_address}", {}

    def extract_price(self, data):
        pairs = data.get("pairs") if isinstance(data, dict) else None
        if not isinstance(pairs, list) or not pairs or not isinstance(pairs[0], dict):
            return None
        pair = pairs[0]
        if not pair.get("priceUsd"):
            return None
        change = pair.get("priceChange")
        return pair["priceUsd"], change.get("h24") if isinstance(change, dict) else None


class GeckoTerminalSource(PriceSource):
    api_type = "geckoterminal"

    NETWORKS = {"solana": "solana", "bsc": "bsc"}

    def build_request(self, token_address, chain):
        network_id = self.NETWORKS.get(chain, "eth")
        return f"{self.base_url}/api/v2/networks/{network_id}/tokens/{token_address}", {}

    def extract_price(self, data):
        body = data.get("data") if isinstance(data, dict) else None
        attributes = body.get("attributes") if isinstance(body, dict) else None
        if not isinstance(attributes, dict) or not attributes.get("price_usd"):
            return None
        return attributes["price_usd"], None


class BirdeyeSource(PriceSource):
    api_type = "birdeye"
    requires_api_key = True

    def supports(self, chain):
        return chain == "solana"

    def build_request(self, token_address, chain):
        return (f"{self.base_url}/defi/price?address={token_address}",
                {"X-API-KEY": self.config.api_key})

    def extract_price(self, data):
        body = data.get("data") if isinstance(data, dict) else None
        if not isinstance(body, dict) or not body.get("value"):
            return None
        return body["value"], body.get("priceChange24h")


# Fixed priority, first source that answers wins
PRICE_SOURCES = (DexScreenerSource, GeckoTerminalSource, BirdeyeSource)


def build_price_sources(api_configs: List[ApiConfig], source_types=PRICE_SOURCES,
                        timeout: float = REQUEST_TIMEOUT) -> List[PriceSource]:
    sources = []
    for source_type in source_types:
        config = next((c for c in api_configs if c.api_type == source_type.api_type and c.is_enabled), None)
        if config is None:
            logger.debug(f"Price source {source_type.api_type} is not configured, skipping")
            continue
        if source_type.requires_api_key and not config.api_key:
            logger.debug(f"Price source {source_type.api_type} has no API key, skipping")
            continue
        sources.append(source_type(config, timeout=timeout))
    return sources


class PriceOracle:
    """
    Ask each configured price source in priority order and return the first
    usable price. A source failing is logged and the next one is tried.
    """

    def __init__(self, api_configs: List[ApiConfig], source_types=PRICE_SOURCES, timeout: float = REQUEST_TIMEOUT):
        self.sources = build_price_sources(api_configs, source_types, timeout)

    def fetch_price(self, token_address: str, chain: str) -> Optional[PriceSample]:
        for source in self.sources:
            if not source.supports(chain):
                continue
            try:
                sample = source.fetch_price(token_address, chain)
            except (requests.RequestException, ValueError) as e:
                logger.error(f"{source.api_type} price fetch error for {token_address}: {e}")
                continue
            if sample is not None:
                return sample

        logger.warning(f"No price source returned a price for {token_address} on {chain}")
        return None


def fetch_current_price(token_address: str, chain: str, api_configs: List[ApiConfig]) -> Optional[float]:
    sample = PriceOracle(api_configs).fetch_price(token_address, chain)
    return sample.price if sample else None
