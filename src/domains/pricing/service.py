# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pricing service for enrollment price tiers.

Each tier has a built-in default amount in Naira. Administrators can
override a tier; the override lives in ``pricing_configs`` and wins over the
default. Prices captured on enrollments never change when a tier changes.
"""

import logging
from dataclasses import dataclass

from src.infrastructure.database.models import PricingConfig
from src.infrastructure.database.repository import AcademyRepository
from src.infrastructure.events import EventBus, EventTypes, get_event_bus
from src.models.common import PriceType
from src.models.pricing import PriceTierResponse
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceOption:
    """Built-in definition of a price tier."""

    price_type: PriceType
    label: str
    amount: int
    description: str


PRICE_OPTIONS: dict[PriceType, PriceOption] = {
    PriceType.FULL_PRICE: PriceOption(
        PriceType.FULL_PRICE, "Full Price", 60000, "Standard enrollment price"
    ),
    PriceType.SIBLING_DISCOUNT: PriceOption(
        PriceType.SIBLING_DISCOUNT,
        "Sibling Discount",
        56000,
        "For siblings enrolled in the same program",
    ),
    PriceType.EARLY_BIRD: PriceOption(
        PriceType.EARLY_BIRD, "Early Bird", 54000, "Early registration discount"
    ),
}


def default_amount(price_type: PriceType) -> int:
    """Built-in amount of a tier."""
    return PRICE_OPTIONS[PriceType(price_type)].amount


def format_currency(amount: int) -> str:
    """Format an amount in Naira, e.g. ``₦60,000``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}₦{abs(amount):,}"


class PricingServiceError(Exception):
    """Base exception for pricing service errors."""

    pass


class InvalidPriceError(PricingServiceError):
    """Raised when a tier amount is not a positive integer."""

    pass


class PricingService:
    """Resolves and updates price tier amounts.

    Attributes:
        repository: Persistence boundary.
        event_bus: Bus that receives tier update events.
    """

    def __init__(
        self,
        repository: AcademyRepository,
        event_bus: EventBus | None = None,
    ) -> None:
        self.repository = repository
        self.event_bus = event_bus or get_event_bus()

    async def amount_for(self, price_type: PriceType) -> int:
        """Effective amount of a tier: the override if set, else the default."""
        config = await self.repository.get_pricing_config(PriceType(price_type).value)
        if config is not None:
            return config.amount
        return default_amount(price_type)

    async def set_amount(
        self,
        price_type: PriceType,
        amount: int,
        updated_by: str | None = None,
    ) -> PriceTierResponse:
        """Create or update the override of a tier.

        Args:
            price_type: Tier to change.
            amount: New amount in Naira.
            updated_by: Id of the operator making the change.

        Returns:
            The tier with its new effective amount.

        Raises:
            InvalidPriceError: If amount is not a positive integer.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidPriceError("Amount must be a positive whole number of Naira")

        price_type = PriceType(price_type)
        config = await self.repository.get_pricing_config(price_type.value)
        if config is None:
            config = PricingConfig(
                price_type=price_type.value,
                amount=amount,
                updated_by=updated_by,
                updated_at=utc_now(),
            )
            await self.repository.add(config)
        else:
            config.amount = amount
            config.updated_by = updated_by
            config.updated_at = utc_now()

        await self.repository.commit()

        logger.info(
            "Price tier updated: type=%s, amount=%d, by=%s",
            price_type.value,
            amount,
            updated_by,
        )

        await self.event_bus.publish(
            EventTypes.Pricing.TIER_UPDATED,
            {
                "price_type": price_type.value,
                "amount": amount,
                "updated_by": updated_by,
            },
        )

        return self._to_response(price_type, config)

    async def list_prices(self) -> list[PriceTierResponse]:
        """Every tier with its effective amount, in declaration order."""
        overrides = {
            c.price_type: c for c in await self.repository.list_pricing_configs()
        }
        return [
            self._to_response(price_type, overrides.get(price_type.value))
            for price_type in PRICE_OPTIONS
        ]

    def _to_response(
        self,
        price_type: PriceType,
        config: PricingConfig | None,
    ) -> PriceTierResponse:
        option = PRICE_OPTIONS[price_type]
        amount = config.amount if config is not None else option.amount
        return PriceTierResponse(
            price_type=price_type,
            label=option.label,
            description=option.description,
            amount=amount,
            default_amount=option.amount,
            formatted=format_currency(amount),
            is_override=config is not None,
            updated_by=config.updated_by if config is not None else None,
            updated_at=config.updated_at if config is not None else None,
        )
