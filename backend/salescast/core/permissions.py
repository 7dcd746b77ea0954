from dataclasses import dataclass
from enum import Enum

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from salescast.models.user import User


class Role(str, Enum):
    INDIVIDUAL = "Individual"
    MANAGER = "Manager"
    ADMIN = "Admin"


class Operation(str, Enum):
    SUBMIT_FORECAST = "submit_forecast"
    LIST_OWN_FORECASTS = "list_own_forecasts"
    VIEW_ROLLUP = "view_rollup"
    EXPORT_ROLLUP = "export_rollup"
    MANAGE_WHITELIST = "manage_whitelist"


EVERYONE = frozenset(Role)

POLICY: dict[Operation, frozenset[Role]] = {
    Operation.SUBMIT_FORECAST: EVERYONE,
    Operation.LIST_OWN_FORECASTS: EVERYONE,
    Operation.VIEW_ROLLUP: frozenset({Role.MANAGER, Role.ADMIN}),
    Operation.EXPORT_ROLLUP: frozenset({Role.MANAGER, Role.ADMIN}),
    Operation.MANAGE_WHITELIST: frozenset({Role.ADMIN}),
}


@dataclass(frozen=True)
class RequestContext:
    """The resolved caller and the db session for one request."""

    user: User
    db: Session

    @property
    def role(self) -> Role:
        return Role(self.user.role)


def is_allowed(role: Role, operation: Operation) -> bool:
    return role in POLICY[operation]


def authorize(ctx: RequestContext, operation: Operation) -> None:
    if not is_allowed(ctx.role, operation):
        allowed = ", ".join(sorted(r.value for r in POLICY[operation]))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied: requires {allowed}",
        )
