"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (mocked backend, FastAPI TestClient)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys
from datetime import datetime
from typing import Any, Dict

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Keep real backend credentials out of the test run
for _var in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_KEY", "GEMINI_API_KEY", "API_KEY"):
    os.environ.pop(_var, None)
os.environ.setdefault("ENV", "testing")

from tests.contracts.campaign.data_contract import CampaignTestDataFactory


# =============================================================================
# Test Configuration
# =============================================================================

class TestConfig:
    """Centralized test configuration"""

    SERVICES = {
        "auth_service": 8201,
        "campaign_service": 8251,
    }

    JWT_SECRET = "test-jwt-secret-for-unit-tests-only"
    JWT_AUDIENCE = "authenticated"

    @classmethod
    def get_service_url(cls, service_name: str) -> str:
        port = cls.SERVICES.get(service_name)
        if not port:
            raise ValueError(f"Unknown service: {service_name}")
        return f"http://localhost:{port}"


@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    """Provide test configuration"""
    return TestConfig()


@pytest.fixture
def factory() -> CampaignTestDataFactory:
    """Provide the campaign test data factory"""
    return CampaignTestDataFactory()


@pytest.fixture
def sample_user(factory: CampaignTestDataFactory) -> Dict[str, Any]:
    """Generate a sample user dict"""
    return {
        "user_id": factory.make_user_id(),
        "email": factory.make_email(),
        "created_at": datetime.utcnow().isoformat(),
    }


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")
