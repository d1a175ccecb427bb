"""Tracks onboarding progress per branch.

One row per branch, created by the first initialize call. Stores which
steps are complete, where the pointer is, and the payload captured for
every step so forms can reload it after the process is finished.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BranchSetup(Base):
    __tablename__ = "branch_setups"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id"), unique=True, nullable=False, index=True
    )
    # in_progress | completed
    status: Mapped[str] = mapped_column(String(20), default="in_progress")
    current_step: Mapped[int] = mapped_column(Integer, default=1)
    completed_steps: Mapped[list] = mapped_column(JSON, default=list)
    # {step_key: payload}: last accepted payload per step
    setup_data: Mapped[dict] = mapped_column(JSON, default=dict)

    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    started_by: Mapped[str | None] = mapped_column(String(36))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    completed_by: Mapped[str | None] = mapped_column(String(36))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
