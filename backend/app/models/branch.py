"""Branch — a physical retail location being onboarded.

Branch records are created by the branch-management screens; the
onboarding workflow only reads them and writes the operating hours,
basic settings, and the activation stamp.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Branch(Base):
    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # main | branch | warehouse | kiosk
    branch_type: Mapped[str | None] = mapped_column(String(20))
    # setup | active | inactive
    status: Mapped[str] = mapped_column(String(20), default="setup")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Weekly table: [{"day": "Monday", "open": "08:00", "close": "22:00", "isOpen": true}, ...]
    operating_hours: Mapped[list | None] = mapped_column(JSON, default=None)
    settings: Mapped[dict | None] = mapped_column(JSON, default=None)

    setup_completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
