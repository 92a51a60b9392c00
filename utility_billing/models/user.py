"""
Profile Model - Synced with Supabase Auth

The id matches auth.users.id from Supabase. Only the role is read by the
API; everything else belongs to the dashboards.
"""
from datetime import datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from utility_billing.db.base import Base


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
