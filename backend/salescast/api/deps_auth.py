# backend/salescast/api/deps_auth.py

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from salescast.core.config import settings
from salescast.core.database import get_db
from salescast.core.permissions import RequestContext
from salescast.core.security import read_session_token
from salescast.models.user import User
from salescast.services.accounts import get_user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """
    Resolve the session cookie to a User. A missing, expired or tampered
    cookie, or one pointing at a deleted user, is treated as anonymous.
    """
    user_id = read_session_token(request.cookies.get(settings.session_cookie_name))
    if user_id is None:
        return None
    return get_user(db, user_id)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def get_context(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RequestContext:
    return RequestContext(user=user, db=db)
