# backend/salescast/api/routes.py

import io
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse, StreamingResponse
from pydantic import BaseModel, Field, field_validator

from salescast.api.deps_auth import get_context, get_optional_user
from salescast.core.config import settings
from salescast.core.permissions import RequestContext
from salescast.models.user import User
from salescast.services.forecasts import list_forecasts, normalize_period, submit_forecast
from salescast.services.rollup import export_rollup_csv, get_rollup
from salescast.services.whitelist import add_to_whitelist, list_whitelist

router = APIRouter()

# ---------- SCHEMAS ----------


class UserOut(BaseModel):
    id: int
    email: str
    display_name: str
    role: str  # "Individual" | "Manager" | "Admin"
    manager_id: Optional[int] = None

    class Config:
        from_attributes = True


class ForecastIn(BaseModel):
    period: date
    # NaN/Infinity do not fit Numeric(14, 2)
    quota: float = Field(allow_inf_nan=False)
    commit: float = Field(allow_inf_nan=False)
    best_case: float = Field(allow_inf_nan=False)

    @field_validator("period", mode="before")
    @classmethod
    def first_of_month(cls, v):
        return normalize_period(v)


class ForecastOut(BaseModel):
    period_month: date
    quota: float
    commit_amount: float
    best_case: float
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RollupRow(BaseModel):
    display_name: str
    period_month: Optional[date] = None
    quota: Optional[float] = None
    commit_amount: Optional[float] = None
    best_case: Optional[float] = None


class WhitelistIn(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v or "@" not in v:
            raise ValueError("a valid email is required")
        return v


class WhitelistOut(BaseModel):
    id: int
    email: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Ack(BaseModel):
    success: bool = True


def period_filter(period: Optional[str] = None) -> Optional[date]:
    if period is None or not period.strip():
        return None
    try:
        return normalize_period(period)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# ---------- SESSION ----------


@router.get("/current_user", response_model=Optional[UserOut])
def current_user(user: Optional[User] = Depends(get_optional_user)):
    return user


@router.get("/logout")
def logout():
    # works without a session too
    response = RedirectResponse(url="/", status_code=302)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response


# ---------- FORECASTS (any signed-in user, own rows only) ----------


@router.get("/forecast", response_model=List[ForecastOut])
def my_forecasts(ctx: RequestContext = Depends(get_context)):
    return list_forecasts(ctx)


@router.post("/forecast", response_model=Ack)
def save_forecast(payload: ForecastIn, ctx: RequestContext = Depends(get_context)):
    submit_forecast(
        ctx,
        period=payload.period,
        quota=payload.quota,
        commit=payload.commit,
        best_case=payload.best_case,
    )
    return Ack()


# ---------- ROLLUP (manager + admin) ----------


@router.get("/rollup", response_model=List[RollupRow])
def rollup(
    period: Optional[date] = Depends(period_filter),
    ctx: RequestContext = Depends(get_context),
):
    return get_rollup(ctx, period)


@router.get("/export")
def export(
    period: Optional[date] = Depends(period_filter),
    ctx: RequestContext = Depends(get_context),
):
    csv_text = export_rollup_csv(ctx, period)

    return StreamingResponse(
        io.BytesIO(csv_text.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="forecast.csv"'},
    )


# ---------- ADMIN (admin only) ----------


@router.post("/admin/whitelist", response_model=Ack)
def whitelist_email(payload: WhitelistIn, ctx: RequestContext = Depends(get_context)):
    add_to_whitelist(ctx, payload.email)
    return Ack()


@router.get("/admin/whitelist", response_model=List[WhitelistOut])
def whitelist_entries(ctx: RequestContext = Depends(get_context)):
    return list_whitelist(ctx)
