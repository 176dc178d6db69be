from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from autoexit.database import get_db
from autoexit.main import app
from autoexit.models import ApiConfiguration, Base, Position
from autoexit.schemas.price import PriceSample
from autoexit.services.auth_service import get_current_user

# Set up the database connection
engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

USER_ID = "user-1"


# Create a new database session for each test
@pytest.fixture(scope="function")
def session():
    Base.metadata.create_all(bind=engine)
    with TestingSessionLocal() as session:
        yield session
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """
    Replace the redis backed exit lock and error queue with in-memory fakes
    """
    class FakeRedis:
        def __init__(self):
            self.locks = {}
            self.queue = []

        def acquire(self, position_id, ttl):
            if position_id in self.locks:
                return None
            self.locks[position_id] = f"token-{position_id}"
            return self.locks[position_id]

        def release(self, position_id, token):
            if self.locks.get(position_id) == token:
                del self.locks[position_id]

        def push(self, data, queue_name="errors"):
            self.queue.append(data)

    fake = FakeRedis()
    monkeypatch.setattr("autoexit.services.monitor_service.acquire_exit_lock", fake.acquire)
    monkeypatch.setattr("autoexit.services.monitor_service.release_exit_lock", fake.release)
    monkeypatch.setattr("autoexit.services.monitor_service.push_to_redis_queue", fake.push)
    return fake


# Override the get_db dependency to use the testing session
@pytest.fixture(scope="function")
def anonymous_client(session):
    def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(anonymous_client):
    app.dependency_overrides[get_current_user] = lambda: USER_ID
    return anonymous_client


@pytest.fixture
def make_response():
    def _make_response(status_code=200, json_data=None, text=""):
        response = Mock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.text = text
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return _make_response


@pytest.fixture
def api_configs(session):
    rows = [
        ApiConfiguration(api_type="dexscreener", api_name="DexScreener API", base_url="https://api.dexscreener.com"),
        ApiConfiguration(api_type="geckoterminal", api_name="GeckoTerminal API", base_url="https://api.geckoterminal.com"),
        ApiConfiguration(api_type="trade_execution", api_name="Jupiter Trade API", base_url="https://trade.example",
                         api_key_encrypted="secret"),
    ]
    session.add_all(rows)
    session.commit()
    return rows


@pytest.fixture
def make_position(session):
    def _make_position(**overrides):
        values = {
            "user_id": USER_ID,
            "token_address": "So11111111111111111111111111111111111111112",
            "token_symbol": "MEME",
            "token_name": "Meme Coin",
            "chain": "solana",
            "entry_price": 1.0,
            "current_price": 1.0,
            "amount": 1000.0,
            "entry_value": 1000.0,
            "current_value": 1000.0,
            "profit_loss_percent": 0.0,
            "profit_loss_value": 0.0,
            "profit_take_percent": 50.0,
            "stop_loss_percent": 20.0,
        }
        values.update(overrides)
        position = Position(**values)
        session.add(position)
        session.commit()
        return position

    return _make_position


def quote(prices):
    """
    Fake PriceOracle.fetch_price answering from a token address -> price map
    """
    def _fetch_price(token_address, chain):
        price = prices.get(token_address)
        if isinstance(price, Exception):
            raise price
        if price is None:
            return None
        return PriceSample(token_address=token_address, price=price, source="dexscreener",
                           fetched_at=datetime.now(timezone.utc))

    return _fetch_price
