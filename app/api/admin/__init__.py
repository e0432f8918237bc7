from fastapi import APIRouter

from app.api.admin.campaigns import router as campaigns_router
from app.api.admin.referral_rewards import router as referral_rewards_router
from app.api.admin.spin_wheel import router as spin_wheel_router
from app.api.admin.vouchers import router as vouchers_router

router = APIRouter()
router.include_router(vouchers_router)
router.include_router(campaigns_router)
router.include_router(spin_wheel_router)
router.include_router(referral_rewards_router)
