from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
    func,
)

from salescast.core.database import Base

MONEY = Numeric(14, 2)


class Forecast(Base):
    __tablename__ = "forecasts"

    __table_args__ = (
        # upsert target: one row per user per month
        UniqueConstraint("user_id", "period_month", name="uq_forecasts_user_period"),
        Index("ix_forecasts_period_month", "period_month"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # always the first day of the month
    period_month = Column(Date, nullable=False)

    # negative and zero amounts are accepted as submitted
    quota = Column(MONEY, nullable=False)
    commit_amount = Column(MONEY, nullable=False)
    best_case = Column(MONEY, nullable=False)

    updated_at = Column(DateTime, server_default=func.now(), nullable=False)
