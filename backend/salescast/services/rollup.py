import csv
import io
from datetime import date
from typing import Any, Optional

from sqlalchemy import and_

from salescast.core.permissions import Operation, RequestContext, authorize
from salescast.models.forecast import Forecast
from salescast.models.user import User

CSV_FIELDS = ["display_name", "quota", "commit_amount", "best_case"]


def _rollup_rows(ctx: RequestContext, period: Optional[date]) -> list[dict[str, Any]]:
    # one row per report per submitted period; reports with nothing submitted
    # (or nothing for `period`) still show up with null amounts
    on = User.id == Forecast.user_id
    if period is not None:
        on = and_(on, Forecast.period_month == period)

    q = (
        ctx.db.query(
            User.display_name,
            Forecast.period_month,
            Forecast.quota,
            Forecast.commit_amount,
            Forecast.best_case,
        )
        .outerjoin(Forecast, on)
        .filter(User.manager_id == ctx.user.id)
        .order_by(
            Forecast.commit_amount.desc().nulls_last(),
            User.display_name,
            Forecast.period_month.desc(),
        )
    )

    return [dict(r._mapping) for r in q.all()]


def get_rollup(ctx: RequestContext, period: Optional[date] = None) -> list[dict[str, Any]]:
    authorize(ctx, Operation.VIEW_ROLLUP)
    return _rollup_rows(ctx, period)


def export_rollup_csv(ctx: RequestContext, period: Optional[date] = None) -> str:
    authorize(ctx, Operation.EXPORT_ROLLUP)

    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(CSV_FIELDS)

    for r in _rollup_rows(ctx, period):
        w.writerow(["" if r[f] is None else r[f] for f in CSV_FIELDS])

    return buf.getvalue()
