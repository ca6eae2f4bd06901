"""Authentication decorators."""

import hmac
import logging
from functools import wraps
from typing import Callable, Optional

from flask import request, jsonify

from bigtable_broker.config import config
from bigtable_broker.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def check_credentials(username: Optional[str], password: Optional[str]) -> None:
    """Validate HTTP basic credentials against the configured broker account.

    Authentication is disabled when no broker username is configured.
    """
    if not config.api.username:
        return

    if username is None or password is None:
        raise AuthenticationError("Authentication required")

    username_ok = hmac.compare_digest(username.encode(), config.api.username.encode())
    password_ok = hmac.compare_digest(password.encode(), (config.api.password or "").encode())
    if not (username_ok and password_ok):
        raise AuthenticationError("Invalid broker credentials")


def broker_auth_required(f: Callable) -> Callable:
    """Decorator to require the broker's basic auth credentials."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth = request.authorization
        try:
            check_credentials(
                auth.username if auth else None,
                auth.password if auth else None
            )
        except AuthenticationError as e:
            logger.warning(f"Rejected request to {request.path}: {e.message}")
            response = jsonify({'error': 'Unauthorized', 'description': e.message})
            response.headers['WWW-Authenticate'] = 'Basic realm="bigtable-broker"'
            return response, 401
        return f(*args, **kwargs)
    return decorated_function
