"""
Fixtures for integration tests.

Provides:
- Test client for FastAPI app
- Mock Signal Store client backed by snapshot files
- Mock case webhook client
- In-memory database for testing
"""

import json
from pathlib import Path
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from merchant_risk.main import app
from merchant_risk.core.dependencies import (
    get_case_webhook_client,
    get_recommendation_repository,
    get_signal_store_client,
)
from merchant_risk.domain.entities import MerchantSignals, RecommendationRecord
from merchant_risk.domain.exceptions import MerchantNotFoundException, SignalStoreException
from merchant_risk.domain.interfaces import CaseWebhookClient, SignalStoreClient
from merchant_risk.infrastructure.clients import parse_signals_payload
from merchant_risk.infrastructure.database import Base
from merchant_risk.infrastructure.repositories import PostgresRecommendationRepository


# =============================================================================
# Test Data Loading
# =============================================================================

SIGNALS_DIR = Path(__file__).parent.parent / "fixtures" / "signals"


def load_merchant_signals(merchant_id: str) -> MerchantSignals:
    """Load a Signal Store snapshot from the fixture files."""
    file_path = SIGNALS_DIR / f"{merchant_id}.json"

    if not file_path.exists():
        raise MerchantNotFoundException(merchant_id)

    with open(file_path) as f:
        data = json.load(f)

    return parse_signals_payload(data)


# =============================================================================
# Mock Clients
# =============================================================================

class MockSignalStoreClient(SignalStoreClient):
    """Mock Signal Store that returns snapshots from test files."""

    def __init__(self, fail_mode: bool = False, fail_for_merchants: set = None):
        self.fail_mode = fail_mode
        self.fail_for_merchants = fail_for_merchants or set()
        self.call_count = 0

    async def get_signals(self, merchant_id: str) -> MerchantSignals:
        """Return a mock snapshot or raise exceptions based on mode."""
        self.call_count += 1

        if self.fail_mode or merchant_id in self.fail_for_merchants:
            raise SignalStoreException(
                message="Signal Store unavailable",
                status_code=500,
            )

        return load_merchant_signals(merchant_id)

    async def list_merchant_ids(self) -> List[str]:
        """Every merchant with a snapshot file."""
        return sorted(path.stem for path in SIGNALS_DIR.glob("*.json"))


class MockCaseWebhookClient(CaseWebhookClient):
    """Mock case webhook client that tracks deliveries."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.call_count = 0
        self.webhooks_sent = []

    async def send_recommendation_created(self, record: RecommendationRecord) -> bool:
        """Track webhook calls and optionally fail."""
        self.call_count += 1

        if self.fail_mode:
            return False

        self.webhooks_sent.append({"event": "recommendation_created", **record.to_dict()})
        return True


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_signal_store() -> MockSignalStoreClient:
    """Create a mock Signal Store client."""
    return MockSignalStoreClient()


@pytest.fixture
def mock_case_webhook() -> MockCaseWebhookClient:
    """Create a mock case webhook client."""
    return MockCaseWebhookClient()


@pytest.fixture
def failing_signal_store() -> MockSignalStoreClient:
    """Create a Signal Store client that always fails."""
    return MockSignalStoreClient(fail_mode=True)


@pytest.fixture
def failing_case_webhook() -> MockCaseWebhookClient:
    """Create a case webhook client that never delivers."""
    return MockCaseWebhookClient(fail_mode=True)


# =============================================================================
# App Client Fixtures
# =============================================================================

async def _override_client(
    session: AsyncSession,
    signal_store: SignalStoreClient,
    case_webhook: CaseWebhookClient,
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_recommendation_repository():
        return PostgresRecommendationRepository(session)

    app.dependency_overrides[get_recommendation_repository] = override_get_recommendation_repository
    app.dependency_overrides[get_signal_store_client] = lambda: signal_store
    app.dependency_overrides[get_case_webhook_client] = lambda: case_webhook

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(
    test_session: AsyncSession,
    mock_signal_store: MockSignalStoreClient,
    mock_case_webhook: MockCaseWebhookClient,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses an in-memory SQLite database
    - Mocks the Signal Store with snapshot fixture files
    - Mocks the case webhook
    """
    async for ac in _override_client(test_session, mock_signal_store, mock_case_webhook):
        yield ac


@pytest_asyncio.fixture
async def client_with_failing_signal_store(
    test_session: AsyncSession,
    failing_signal_store: MockSignalStoreClient,
    mock_case_webhook: MockCaseWebhookClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client where the Signal Store always fails."""
    async for ac in _override_client(test_session, failing_signal_store, mock_case_webhook):
        yield ac


@pytest_asyncio.fixture
async def client_with_failing_webhook(
    test_session: AsyncSession,
    mock_signal_store: MockSignalStoreClient,
    failing_case_webhook: MockCaseWebhookClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client where the case webhook never delivers."""
    async for ac in _override_client(test_session, mock_signal_store, failing_case_webhook):
        yield ac


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def strict_missing_policy(monkeypatch):
    """Reject merchants with unknown inputs instead of flagging them."""
    monkeypatch.setenv("SCORING_MISSING_FACT_POLICY", "fail")


@pytest.fixture
def broken_tier_cutoffs(monkeypatch):
    """Configure a malformed rule set (cutoffs out of order)."""
    monkeypatch.setenv(
        "SCORING_TIER_CUTOFFS_JSON",
        '{"medium": 8, "high": 7, "very_high": 10}',
    )
