from app.models.base import Base, CreatedAtMixin, TimestampMixin
from app.models.campaign import Campaign, CampaignStock
from app.models.referral import Referral, ReferralReward
from app.models.spin_wheel import SpinWheelPrize
from app.models.voucher import Voucher

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "Campaign",
    "CampaignStock",
    "Referral",
    "ReferralReward",
    "SpinWheelPrize",
    "Voucher",
]
