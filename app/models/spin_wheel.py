from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin


class SpinWheelPrize(CreatedAtMixin, Base):
    __tablename__ = "spin_wheel_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    prize_label: Mapped[str] = mapped_column(String(255))
    win_chance: Mapped[float] = mapped_column(Float)
    campaign_id: Mapped[int | None] = mapped_column(
        ForeignKey("voucher_campaigns.id", ondelete="SET NULL")
    )
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
