"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── campaign/    Campaign service, feed and HTTP API with a mocked backend
    ├── auth/        Authentication service and auth client
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/campaign -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.auth_dependencies import Actor
from core.jwt_manager import JWTManager
from microservices.campaign_service.campaign_service import CampaignService
from microservices.campaign_service.moderation import ContentSafetyGate
from tests.component.mocks import (
    FakeModerationClient,
    MockCampaignRepository,
    MockIdentityClient,
    MockStorageClient,
)
from tests.contracts.campaign.data_contract import TEST_JWT_SECRET, CampaignTestDataFactory


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


def pytest_collection_modifyitems(items):
    """Auto-mark everything under tests/component"""
    for item in items:
        if "component/" in item.nodeid:
            item.add_marker(pytest.mark.component)


# =============================================================================
# Identity
# =============================================================================

@pytest.fixture
def owner(factory: CampaignTestDataFactory) -> Actor:
    """Signed-in campaign owner"""
    user_id = factory.make_user_id()
    return Actor(
        user_id=user_id,
        access_token=factory.make_access_token(user_id, "owner@example.com"),
        email="owner@example.com",
    )


@pytest.fixture
def stranger(factory: CampaignTestDataFactory) -> Actor:
    """Signed-in user who owns nothing"""
    user_id = factory.make_user_id()
    return Actor(
        user_id=user_id,
        access_token=factory.make_access_token(user_id, "stranger@example.com"),
        email="stranger@example.com",
    )


@pytest.fixture
def token_verifier() -> JWTManager:
    """Verifier for tokens minted by the data factory"""
    return JWTManager(secret_key=TEST_JWT_SECRET)


# =============================================================================
# Backend Mocks
# =============================================================================

@pytest.fixture
def mock_repository() -> MockCampaignRepository:
    """In-memory record store"""
    return MockCampaignRepository()


@pytest.fixture
def mock_storage() -> MockStorageClient:
    """In-memory blob store"""
    return MockStorageClient()


@pytest.fixture
def moderation_client() -> FakeModerationClient:
    """Classifier answering SAFE"""
    return FakeModerationClient("SAFE")


@pytest.fixture
def mock_identity() -> MockIdentityClient:
    """Identity provider with canned answers"""
    return MockIdentityClient()


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def campaign_service(mock_repository, mock_storage, moderation_client) -> CampaignService:
    """Campaign service over the in-memory backend"""
    return CampaignService(
        repository=mock_repository,
        storage=mock_storage,
        safety_gate=ContentSafetyGate(moderation_client),
    )
