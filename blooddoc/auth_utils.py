"""
Authentication Utilities for JWT Token Validation
Ensures that:
1. JWT token is valid
2. Account still exists in database
3. Account has the role or ownership an operation requires
"""
import datetime
import logging
from functools import wraps

import jwt
from bson import ObjectId
from django.conf import settings

from .constants import ACCOUNT_COLLECTIONS, ROLE_ADMIN
from .db import get_db
from .exceptions import Forbidden, InvalidToken, Unauthorized

logger = logging.getLogger(__name__)


def issue_token(account):
    """Sign a token carrying the public account fields."""
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "id": account['id'],
        "email": account['email'],
        "name": account['name'],
        "role": account['role'],
        "iat": now,
        "exp": now + datetime.timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token):
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token has expired", code='TOKEN_EXPIRED')
    except jwt.InvalidTokenError:
        raise InvalidToken()

    if not payload.get('id') or payload.get('role') not in ACCOUNT_COLLECTIONS:
        raise InvalidToken("Invalid token payload", code='INVALID_PAYLOAD')
    return payload


def authenticate_request(view_func):
    """
    Decorator to validate the bearer token and verify the account exists.

    Usage:
        @authenticate_request
        def get(self, request):
            account = request.account  # {"id", "email", "name", "role"}
    """
    @wraps(view_func)
    def wrapper(self, request, *args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header or not auth_header.startswith('Bearer '):
            raise Unauthorized()

        payload = decode_token(auth_header.split(' ', 1)[1].strip())

        if not ObjectId.is_valid(payload['id']):
            raise InvalidToken("Invalid user identifier", code='INVALID_USER_ID')

        collection = get_db()[ACCOUNT_COLLECTIONS[payload['role']]]
        if not collection.find_one({"_id": ObjectId(payload['id'])}, {"_id": 1}):
            raise Unauthorized("User no longer exists", code='USER_NOT_FOUND')

        request.account = {
            "id": payload['id'],
            "email": payload.get('email'),
            "name": payload.get('name'),
            "role": payload['role'],
        }
        return view_func(self, request, *args, **kwargs)

    return wrapper


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.
    Must be used AFTER @authenticate_request.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            account = getattr(request, 'account', None)
            if not account:
                raise Unauthorized("Authentication required")
            if account['role'] not in allowed_roles:
                roles = ' or '.join(f"{r}s" for r in allowed_roles)
                raise Forbidden(f"Forbidden: Only {roles} can perform this action.")
            return view_func(self, request, *args, **kwargs)
        return wrapper
    return decorator


def authorize(account, owner_id):
    """Owner-or-admin rule shared by every resource check."""
    if not account:
        return False
    return account.get('role') == ROLE_ADMIN or (owner_id is not None and account.get('id') == str(owner_id))


def ensure_authorized(account, owner_id, message=None):
    if not authorize(account, owner_id):
        logger.info("Denied %s %s access to resource owned by %s", account.get('role'), account.get('id'), owner_id)
        raise Forbidden(message or "Forbidden: You can only access your own resources.")
