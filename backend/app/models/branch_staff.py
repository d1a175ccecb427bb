"""Staff members invited to a branch during onboarding.

The onboarding step only records invitations. Creating the actual login
account is done by the user-management service, which flips `status` to
"active" and fills `account_id`.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BranchStaff(Base):
    __tablename__ = "branch_staff"
    __table_args__ = (
        UniqueConstraint("branch_id", "email", name="uq_branch_staff_email"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30))
    # branch_manager | supervisor | cashier | inventory_staff | kitchen_staff | waiter
    role: Mapped[str] = mapped_column(String(50), default="cashier")
    # invited | active | revoked
    status: Mapped[str] = mapped_column(String(20), default="invited")
    account_id: Mapped[str | None] = mapped_column(String(36))
    invited_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
