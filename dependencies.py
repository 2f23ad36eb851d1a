"""Access guard: bearer-token authentication and role checks for routes."""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

import models
from database import get_db
from exceptions import AuthenticationError, AuthorizationError
from utils import decode_access_token

# auto_error is off so a missing header is reported as 401 by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    """Resolve the bearer token to a stored user or raise 401."""
    if credentials is None:
        raise AuthenticationError("Not authorized, no token provided", ["No token"])
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Not authorized, token failed or expired", ["Invalid or expired token"])
    user = db.query(models.User).filter(models.User.id == payload["sub"]).first()
    if not user:
        raise AuthenticationError("Not authorized, user not found", ["User not found"])
    return user


def require_roles(*roles: models.UserRole):
    """Dependency factory: the current user, provided their role is one of ``roles``."""

    def checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role not in roles:
            raise AuthorizationError(
                f"User role {current_user.role.value} is not authorized to access this route",
                ["Forbidden role"],
            )
        return current_user

    return checker
