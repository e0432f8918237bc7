from __future__ import annotations

import argparse
import asyncio

from app.core.config import Settings, settings
from app.schemas.admin.campaign import CampaignCreate, CampaignOut
from app.stores import build_store


async def _create_campaign(payload: CampaignCreate, config: Settings = settings) -> CampaignOut:
    store = build_store(config)
    await store.initialize()
    try:
        campaign = await store.create_campaign(payload.model_dump())
        issued = await store.count_vouchers_by_value(campaign.content)
    finally:
        await store.close()

    print(
        f"Created campaign {campaign.id}: {campaign.content!r} "
        f"(quantity={campaign.quantity}, status={campaign.status}, already issued={issued})"
    )
    return campaign


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a voucher campaign.")
    parser.add_argument("--content", required=True, help="Voucher value the campaign grants.")
    parser.add_argument(
        "--quantity", required=True, type=int, help="Maximum vouchers for this content."
    )
    parser.add_argument("--status", default="active", help="Informational campaign status.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    if args.quantity < 0:
        raise SystemExit("Quantity must be zero or greater")

    asyncio.run(
        _create_campaign(
            CampaignCreate(content=args.content.strip(), quantity=args.quantity, status=args.status)
        )
    )


if __name__ == "__main__":
    main()
