#!/usr/bin/env python3
"""
Core Module for SocietyFixer

Shared components for the auth and campaign services and their clients.

COMPONENTS:
    - config/: Environment-driven configuration (dotenv + dataclasses)
    - backend_client.py: Base adapter for the hosted backend-as-a-service
    - jwt_manager.py: Verification of provider-issued access tokens
    - auth_dependencies.py: FastAPI bearer-token dependencies
    - notifications.py: Toast queue
    - local_state.py: Advisory client-local key/value state
    - app_context.py: Application root wiring the clients together

USAGE:
    from core.config import get_settings
    from core.app_context import create_app_context

    context = create_app_context(get_settings())
"""

__version__ = "1.0.0"
