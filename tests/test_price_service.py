from unittest.mock import patch

import pytest
import requests

from autoexit.schemas.api_configuration import ApiConfig
from autoexit.services.price_service import (
    BirdeyeSource,
    DexScreenerSource,
    GeckoTerminalSource,
    PriceOracle,
    build_price_sources,
    fetch_current_price,
)

TOKEN = "TokenAddress111"

DEXSCREENER = ApiConfig(api_type="dexscreener", base_url="https://api.dexscreener.com")
GECKOTERMINAL = ApiConfig(api_type="geckoterminal", base_url="https://api.geckoterminal.com")
BIRDEYE = ApiConfig(api_type="birdeye", base_url="https://public-api.birdeye.so", api_key_encrypted="birdeye-key")

dexscreener_body = {"pairs": [{"priceUsd": "1.55", "priceChange": {"h24": 12.5}}]}
geckoterminal_body = {"data": {"attributes": {"price_usd": "1.40"}}}
birdeye_body = {"data": {"value": 1.30, "priceChange24h": -3.0}}


def route(responses):
    """
    side_effect that answers requests.get by matching the host of the url
    """
    def _get(url, headers=None, timeout=None):
        for host, response in responses.items():
            if host in url:
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"Unexpected call to {url}")

    return _get


class TestPriceOracle:
    def test_first_source_wins(self, make_response):
        oracle = PriceOracle([DEXSCREENER, GECKOTERMINAL, BIRDEYE])
        with patch("autoexit.services.price_service.requests.get",
                   side_effect=route({"dexscreener": make_response(json_data=dexscreener_body)})) as get:
            sample = oracle.fetch_price(TOKEN, "solana")

        assert sample.price == 1.55
        assert sample.price_change_24h == 12.5
        assert sample.source == "dexscreener"
        assert get.call_count == 1
        assert get.call_args.args[0] == f"https://api.dexscreener.com/latest/dex/tokens/{TOKEN}"

    def test_fallback_stops_at_first_success(self, make_response):
        oracle = PriceOracle([DEXSCREENER, GECKOTERMINAL, BIRDEYE])
        responses = {
            "dexscreener": requests.ConnectionError("connection refused"),
            "geckoterminal": make_response(json_data=geckoterminal_body),
            "birdeye": make_response(json_data=birdeye_body),
        }
        with patch("autoexit.services.price_service.requests.get", side_effect=route(responses)) as get:
            sample = oracle.fetch_price(TOKEN, "solana")

        assert sample.price == 1.40
        assert sample.source == "geckoterminal"
        called_urls = [call.args[0] for call in get.call_args_list]
        assert not any("birdeye" in url for url in called_urls)

    @pytest.mark.parametrize(
        "dexscreener_response",
        [
            pytest.param({"status_code": 500, "json_data": None}, id="http_error"),
            pytest.param({"json_data": {"pairs": []}}, id="no_pairs"),
            pytest.param({"json_data": {"pairs": None}}, id="null_pairs"),
            pytest.param({"json_data": {"pairs": [{"priceUsd": "not-a-number"}]}}, id="bad_price"),
            pytest.param({"json_data": {"pairs": [{"priceUsd": "0"}]}}, id="zero_price"),
            pytest.param({"json_data": ["unexpected"]}, id="wrong_shape"),
            pytest.param({"json_data": ValueError("Expecting value")}, id="invalid_json"),
        ]
    )
    def test_unusable_answer_falls_through(self, make_response, dexscreener_response):
        oracle = PriceOracle([DEXSCREENER, GECKOTERMINAL])
        responses = {
            "dexscreener": make_response(**dexscreener_response),
            "geckoterminal": make_response(json_data=geckoterminal_body),
        }
        with patch("autoexit.services.price_service.requests.get", side_effect=route(responses)):
            sample = oracle.fetch_price(TOKEN, "solana")

        assert sample.source == "geckoterminal"

    def test_not_found_when_every_source_fails(self, make_response):
        oracle = PriceOracle([DEXSCREENER, GECKOTERMINAL, BIRDEYE])
        responses = {
            "dexscreener": requests.Timeout("timed out"),
            "geckoterminal": make_response(status_code=404),
            "birdeye": make_response(json_data={"data": {}}),
        }
        with patch("autoexit.services.price_service.requests.get", side_effect=route(responses)) as get:
            sample = oracle.fetch_price(TOKEN, "solana")

        assert sample is None
        assert get.call_count == 3

    def test_unexpected_error_is_raised(self):
        oracle = PriceOracle([DEXSCREENER])
        with patch("autoexit.services.price_service.requests.get", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                oracle.fetch_price(TOKEN, "solana")

    def test_priority_does_not_depend_on_config_order(self, make_response):
        oracle = PriceOracle([BIRDEYE, GECKOTERMINAL, DEXSCREENER])

        assert [type(source) for source in oracle.sources] == [DexScreenerSource, GeckoTerminalSource, BirdeyeSource]

    def test_birdeye_only_for_solana(self, make_response):
        oracle = PriceOracle([BIRDEYE])
        with patch("autoexit.services.price_service.requests.get") as get:
            sample = oracle.fetch_price(TOKEN, "bsc")

        assert sample is None
        get.assert_not_called()

    def test_birdeye_sends_api_key(self, make_response):
        oracle = PriceOracle([BIRDEYE])
        with patch("autoexit.services.price_service.requests.get",
                   return_value=make_response(json_data=birdeye_body)) as get:
            sample = oracle.fetch_price(TOKEN, "solana")

        assert sample.price == 1.30
        assert sample.price_change_24h == -3.0
        assert get.call_args.kwargs["headers"] == {"X-API-KEY": "birdeye-key"}

    @pytest.mark.parametrize("chain, network", [("solana", "solana"), ("bsc", "bsc"), ("ethereum", "eth"), ("base", "eth")])
    def test_geckoterminal_network(self, make_response, chain, network):
        oracle = PriceOracle([GECKOTERMINAL])
        with patch("autoexit.services.price_service.requests.get",
                   return_value=make_response(json_data=geckoterminal_body)) as get:
            oracle.fetch_price(TOKEN, chain)

        assert get.call_args.args[0] == f"https://api.geckoterminal.com/api/v2/networks/{network}/tokens/{TOKEN}"


class TestBuildPriceSources:
    def test_disabled_source_is_skipped(self):
        disabled = DEXSCREENER.model_copy(update={"is_enabled": False})

        sources = build_price_sources([disabled, GECKOTERMINAL])

        assert [source.api_type for source in sources] == ["geckoterminal"]

    def test_birdeye_without_key_is_skipped(self):
        no_key = BIRDEYE.model_copy(update={"api_key_encrypted": None})

        assert build_price_sources([no_key]) == []

    def test_unrelated_configs_are_ignored(self):
        trade = ApiConfig(api_type="trade_execution", base_url="https://trade.example")

        assert build_price_sources([trade]) == []


def test_fetch_current_price(make_response):
    with patch("autoexit.services.price_service.requests.get",
               return_value=make_response(json_data=dexscreener_body)):
        assert fetch_current_price(TOKEN, "solana", [DEXSCREENER]) == 1.55

    assert fetch_current_price(TOKEN, "solana", []) is None
