"""
Auth Service Clients Module

HTTP clients for the external identity provider.
"""

from .identity_client import IdentityClient

__all__ = [
    "IdentityClient",
]
