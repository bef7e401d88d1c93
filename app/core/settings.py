from datetime import datetime
from sqlalchemy import CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from app.core.utils import utcnow
from app.db.base import Base


COUNTER_ID = 1


class GlobalSetting(Base):
    """
    Global daily token counter - Singleton pattern.
    Only one row allowed in the entire table (id=1).
    """
    __tablename__ = "global_settings"

    # Singleton pattern - enforce single row
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        default=COUNTER_ID,
        comment="Fixed ID=1 for singleton pattern"
    )

    last_token: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Last token number handed out"
    )

    last_token_date: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        comment="When the last token was issued (naive UTC)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(f"id = {COUNTER_ID}", name="single_global_settings_row"),
        CheckConstraint("last_token >= 0", name="non_negative_last_token"),
    )

    def __repr__(self) -> str:
        return (
            f"<GlobalSetting(last_token={self.last_token}, "
            f"last_token_date={self.last_token_date})>"
        )
