"""Branch-scoped configuration key-value store."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class StoreSetting(Base):
    """Key-value setting per branch, grouped by category.

    Seeded on setup initialize:
      - general: currency, timezone
      - pos: receipt_header, receipt_footer, tax_enabled, tax_rate
    """
    __tablename__ = "store_settings"
    __table_args__ = (
        UniqueConstraint("branch_id", "category", "key", name="uq_store_setting"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str | None] = mapped_column(Text)
    # string | number | boolean | json
    data_type: Mapped[str] = mapped_column(String(20), default="string")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
