"""Authentication for the service broker API."""

from .decorators import broker_auth_required, check_credentials

__all__ = [
    'broker_auth_required',
    'check_credentials'
]
