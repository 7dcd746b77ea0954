from sqlalchemy import Column, DateTime, Integer, String, func

from salescast.core.database import Base


class WhitelistEntry(Base):
    __tablename__ = "whitelist"

    id = Column(Integer, primary_key=True, index=True)

    # stored lower-cased; duplicates are dropped by ON CONFLICT DO NOTHING
    email = Column(String, unique=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
