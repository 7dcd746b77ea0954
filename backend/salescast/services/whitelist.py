import logging

from salescast.core.database import dialect_insert
from salescast.core.permissions import Operation, RequestContext, authorize
from salescast.models.whitelist import WhitelistEntry
from salescast.services.accounts import normalize_email

logger = logging.getLogger(__name__)


def add_to_whitelist(ctx: RequestContext, email: str) -> bool:
    """
    Append an email to the whitelist. Returns False if it was already there.
    """
    authorize(ctx, Operation.MANAGE_WHITELIST)

    email = normalize_email(email)
    if not email:
        raise ValueError("email is required")

    stmt = (
        dialect_insert(ctx.db, WhitelistEntry.__table__)
        .values(email=email)
        .on_conflict_do_nothing(index_elements=["email"])
    )
    result = ctx.db.execute(stmt)
    ctx.db.commit()

    added = result.rowcount == 1
    if added:
        logger.info("User %s whitelisted %s", ctx.user.id, email)
    else:
        logger.info("User %s re-submitted whitelisted email %s", ctx.user.id, email)
    return added


def list_whitelist(ctx: RequestContext) -> list[WhitelistEntry]:
    authorize(ctx, Operation.MANAGE_WHITELIST)
    return ctx.db.query(WhitelistEntry).order_by(WhitelistEntry.id).all()
