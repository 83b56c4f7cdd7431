"""
Marketplace prices and commission, read from system_settings with
config defaults for missing or malformed values.
"""

from typing import Optional

from core.config import settings
from core.logging import get_logger

logger = get_logger(__name__)

COMMISSION_KEY = "platform_commission"
FEATURED_PRICE_KEY = "featured_listing_price"
PREMIUM_PRICE_KEY = "trainer_premium_price"


class PlatformSettings:
    def __init__(self, settings_repo):
        self.repo = settings_repo

    async def _number(self, key: str, default: float) -> float:
        raw: Optional[str] = await self.repo.get_value(key)
        if raw is None or str(raw).strip() == "":
            return float(default)
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Setting {key}={raw!r} is not a number, using {default}")
            return float(default)

    async def commission_pct(self) -> float:
        return await self._number(COMMISSION_KEY, settings.platform_commission)

    async def featured_daily_price(self) -> float:
        return await self._number(FEATURED_PRICE_KEY, settings.featured_listing_daily_price)

    async def trainer_premium_price(self) -> float:
        return await self._number(PREMIUM_PRICE_KEY, settings.trainer_premium_monthly_price)
