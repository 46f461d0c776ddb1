"""API test fixtures — FastAPI app over ASGITransport with wired workers.

Invariants:
    - app.state carries the test bus, bank client and session manager
    - get_settings overridden so routes build FakeBank URLs

Design Decisions:
    - Lifespan not run: ASGITransport skips it, fixtures assign app.state directly
"""

import pytest
from httpx import ASGITransport, AsyncClient

from conto.config import Settings, get_settings
from conto.main import app

from tests.fake_bank import ACCOUNT_ID, BASE_URL


@pytest.fixture
def test_settings():
    return Settings(
        bank_api_base_url=BASE_URL,
        bank_account_id=ACCOUNT_ID,
        bank_api_key="test-api-key",
    )


@pytest.fixture
async def client(wired_bus, bank_client, db_manager, test_settings):
    """Test client over the real app with the test bus attached."""
    app.state.bus = wired_bus
    app.state.bank_client = bank_client
    app.state.db_manager = db_manager
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
