from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin


class Campaign(CreatedAtMixin, Base):
    __tablename__ = "voucher_campaigns"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_voucher_campaigns_quantity"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    content: Mapped[str] = mapped_column(Text, index=True)
    quantity: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(20), default="active")


class CampaignStock(Base):
    """Issued counter per stock pool; campaigns sharing ``content`` share a row."""

    __tablename__ = "campaign_stock"
    __table_args__ = (CheckConstraint("issued >= 0", name="ck_campaign_stock_issued"),)

    content: Mapped[str] = mapped_column(Text, primary_key=True)
    issued: Mapped[int] = mapped_column(Integer, default=0)
