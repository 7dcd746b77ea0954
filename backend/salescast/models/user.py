from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from salescast.core.database import Base


class User(Base):
    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint(
            "role IN ('Individual', 'Manager', 'Admin')",
            name="ck_users_role",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # unique so two racing first logins cannot both insert
    google_id = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, nullable=False, index=True)
    display_name = Column(String, nullable=False)

    # "Individual" | "Manager" | "Admin"
    role = Column(String, nullable=False, default="Individual", server_default="Individual")

    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    manager = relationship("User", remote_side=[id], backref="reports")
