from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from runclub.core.errors import AuthenticationError, AuthorizationError
from runclub.db import get_db
from runclub.models.user import User
from runclub.schemas.user import Role


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the identity set by the upstream gateway.

    Credentials are verified upstream; this only maps the id to a user row.
    """
    if not x_user_id:
        raise AuthenticationError()
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise AuthenticationError("Malformed user identity")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError("Unknown user")
    return user


def require_staff(user: User = Depends(get_current_user)) -> User:
    """Coaches and admins only."""
    if user.role not in (Role.coach.value, Role.admin.value):
        raise AuthorizationError("Coach or admin role required")
    return user
