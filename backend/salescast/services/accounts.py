import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salescast.core.google_oauth import ProviderIdentity
from salescast.core.permissions import Role
from salescast.models.user import User
from salescast.models.whitelist import WhitelistEntry

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_whitelisted(db: Session, email: str) -> bool:
    email = normalize_email(email)
    if not email:
        return False
    return db.query(WhitelistEntry.id).filter(WhitelistEntry.email == email).first() is not None


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def resolve_login(db: Session, identity: ProviderIdentity) -> Optional[User]:
    """
    Map a provider identity to a User row.

    Returns None when the email is not whitelisted; nothing is written in that case.
    Existing users are returned untouched. First-time users are created as
    Individual with no manager.
    """
    email = normalize_email(identity.email)

    if not is_whitelisted(db, email):
        logger.warning("Sign-in rejected for %s: not whitelisted", email)
        return None

    user = db.query(User).filter(User.google_id == identity.provider_id).first()
    if user:
        logger.info("Sign-in accepted for user %s", user.id)
        return user

    user = User(
        google_id=identity.provider_id,
        email=email,
        display_name=identity.display_name,
        role=Role.INDIVIDUAL.value,
        manager_id=None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent first login inserted the same google_id first
        db.rollback()
        user = db.query(User).filter(User.google_id == identity.provider_id).first()
        if user is None:
            raise
        logger.info("Sign-in accepted for user %s (concurrent first login)", user.id)
        return user

    db.refresh(user)
    logger.info("Created user %s for %s", user.id, email)
    return user
