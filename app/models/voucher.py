from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class Voucher(TimestampMixin, Base):
    __tablename__ = "vouchers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str | None] = mapped_column(String(255), index=True)
    value: Mapped[str | None] = mapped_column(Text, index=True)
    prize: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str | None] = mapped_column(String(50))
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
