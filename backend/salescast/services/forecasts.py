from datetime import date, datetime
from typing import Union

from sqlalchemy import func

from salescast.core.database import dialect_insert
from salescast.core.permissions import Operation, RequestContext, authorize
from salescast.models.forecast import Forecast


def normalize_period(value: Union[str, date, datetime]) -> date:
    """
    Accepts a date, "YYYY-MM-DD" or "YYYY-MM" and returns the first day of that month.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.replace(day=1)

    s = str(value).strip()
    try:
        if len(s) == 7:
            return datetime.strptime(s, "%Y-%m").date()
        return date.fromisoformat(s[:10]).replace(day=1)
    except ValueError as e:
        raise ValueError(f"Invalid period {value!r}, expected YYYY-MM or YYYY-MM-DD") from e


def submit_forecast(
    ctx: RequestContext,
    *,
    period: Union[str, date],
    quota: float,
    commit: float,
    best_case: float,
) -> None:
    authorize(ctx, Operation.SUBMIT_FORECAST)

    values = {
        "user_id": ctx.user.id,
        "period_month": normalize_period(period),
        "quota": quota,
        "commit_amount": commit,
        "best_case": best_case,
        "updated_at": func.now(),
    }

    stmt = dialect_insert(ctx.db, Forecast.__table__).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "period_month"],
        set_={
            "quota": stmt.excluded.quota,
            "commit_amount": stmt.excluded.commit_amount,
            "best_case": stmt.excluded.best_case,
            "updated_at": func.now(),
        },
    )

    ctx.db.execute(stmt)
    ctx.db.commit()


def list_forecasts(ctx: RequestContext) -> list[Forecast]:
    authorize(ctx, Operation.LIST_OWN_FORECASTS)

    return (
        ctx.db.query(Forecast)
        .filter(Forecast.user_id == ctx.user.id)
        .order_by(Forecast.period_month.desc())
        .all()
    )
