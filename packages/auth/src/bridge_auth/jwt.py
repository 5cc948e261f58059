"""Access-token verification and role checks for Python services.

Temporal workers use this to turn a bearer token into an AuthUser and to guard
role-restricted verbs. This is a library: Auth has no task queue and no
worker process.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

import jwt as pyjwt
from bridge_shared.auth_models import AuthUser
from bridge_shared.errors import UnauthorizedError

DEVELOPER = "developer"
RESEARCHER = "researcher"
ADMIN = "admin"


def verify_token(token: str, jwt_secret: str | None = None) -> AuthUser:
    """Decode and validate an HS256 access token.

    Args:
        token: The raw JWT string (from the Authorization header).
        jwt_secret: Signing secret. Defaults to BRIDGE_JWT_SECRET.

    Returns:
        AuthUser with user_id, email, study, roles, and expiry.

    Raises:
        pyjwt.ExpiredSignatureError: Token has expired.
        pyjwt.InvalidSignatureError: Signature doesn't match the secret.
        pyjwt.MissingRequiredClaimError: sub or exp missing.
        pyjwt.DecodeError: Malformed token.
    """
    secret = jwt_secret or os.environ.get("BRIDGE_JWT_SECRET", "")
    if not secret:
        raise ValueError("No JWT secret given and BRIDGE_JWT_SECRET is not set")

    payload = pyjwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        audience="bridge",
        options={"require": ["exp", "sub"]},
    )

    return AuthUser(
        user_id=payload["sub"],
        email=payload.get("email", ""),
        study_id=payload.get("study_id", "api"),
        roles=list(payload.get("roles", [])),
        exp=payload["exp"],
    )


def require_role(user: AuthUser, *roles: str) -> None:
    """Raise UnauthorizedError unless the user holds at least one of `roles`.

    Admins pass every check.
    """
    if has_any_role(user, roles) or ADMIN in user.roles:
        return
    raise UnauthorizedError(
        f"Caller {user.user_id} does not have a required role ({', '.join(roles)})"
    )


def has_any_role(user: AuthUser, roles: Iterable[str]) -> bool:
    return any(role in user.roles for role in roles)
