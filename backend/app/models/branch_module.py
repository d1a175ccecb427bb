import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BranchModule(Base):
    """Activation record of one catalog module for one branch."""
    __tablename__ = "branch_modules"
    __table_args__ = (
        UniqueConstraint("branch_id", "module_code", name="uq_branch_module"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id"), nullable=False, index=True
    )
    module_code: Mapped[str] = mapped_column(String(50), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    enabled_by: Mapped[str | None] = mapped_column(String(36))
    enabled_at: Mapped[datetime | None] = mapped_column(DateTime)
    settings: Mapped[dict | None] = mapped_column(JSON, default=None)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
