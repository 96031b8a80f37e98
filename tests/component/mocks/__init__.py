"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (record store, blob store,
moderation classifier, identity provider).
"""

from .campaign_mocks import (
    STORAGE_URL,
    FakeModerationClient,
    MockCampaignRepository,
    MockIdentityClient,
    MockStorageClient,
    rejected,
    unreachable,
)

__all__ = [
    'STORAGE_URL',
    'FakeModerationClient',
    'MockCampaignRepository',
    'MockIdentityClient',
    'MockStorageClient',
    'rejected',
    'unreachable',
]
