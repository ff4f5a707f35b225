# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the pricing service."""

import pytest

from src.domains.pricing import (
    InvalidPriceError,
    PricingService,
    default_amount,
    format_currency,
)
from src.infrastructure.events import EventTypes
from src.models.common import PriceType


@pytest.fixture
def pricing(repository, event_bus) -> PricingService:
    return PricingService(repository, event_bus=event_bus)


class TestDefaults:
    """Built-in tier amounts."""

    @pytest.mark.parametrize(
        "price_type,amount",
        [
            (PriceType.FULL_PRICE, 60000),
            (PriceType.SIBLING_DISCOUNT, 56000),
            (PriceType.EARLY_BIRD, 54000),
        ],
    )
    def test_default_amount(self, price_type, amount):
        assert default_amount(price_type) == amount

    def test_format_currency(self):
        assert format_currency(60000) == "₦60,000"
        assert format_currency(-500) == "-₦500"


class TestPricingService:
    """Tests for overrides and listing."""

    @pytest.mark.asyncio
    async def test_amount_falls_back_to_default(self, pricing):
        assert await pricing.amount_for(PriceType.EARLY_BIRD) == 54000

    @pytest.mark.asyncio
    async def test_set_amount_creates_override(self, pricing, repository):
        tier = await pricing.set_amount(PriceType.FULL_PRICE, 65000, updated_by="admin-1")

        assert tier.amount == 65000
        assert tier.default_amount == 60000
        assert tier.is_override is True
        assert tier.updated_by == "admin-1"
        assert tier.formatted == "₦65,000"
        assert await pricing.amount_for(PriceType.FULL_PRICE) == 65000
        assert repository.commits == 1

    @pytest.mark.asyncio
    async def test_set_amount_updates_existing_override(self, pricing, repository):
        await pricing.set_amount(PriceType.FULL_PRICE, 65000)

        tier = await pricing.set_amount(PriceType.FULL_PRICE, 62000, updated_by="admin-2")

        assert tier.amount == 62000
        assert len(repository.pricing) == 1
        assert repository.pricing[PriceType.FULL_PRICE.value].updated_by == "admin-2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -100, 1.5, True])
    async def test_set_amount_rejects_invalid(self, pricing, repository, amount):
        with pytest.raises(InvalidPriceError):
            await pricing.set_amount(PriceType.FULL_PRICE, amount)

        assert repository.pricing == {}

    @pytest.mark.asyncio
    async def test_list_prices(self, pricing):
        await pricing.set_amount(PriceType.SIBLING_DISCOUNT, 50000)

        tiers = await pricing.list_prices()

        assert [t.price_type for t in tiers] == [
            PriceType.FULL_PRICE,
            PriceType.SIBLING_DISCOUNT,
            PriceType.EARLY_BIRD,
        ]
        assert [t.amount for t in tiers] == [60000, 50000, 54000]
        assert [t.is_override for t in tiers] == [False, True, False]

    @pytest.mark.asyncio
    async def test_override_does_not_change_captured_prices(
        self, pricing, builder, repository
    ):
        enrollment = builder.enrollment(builder.student(), builder.program())

        await pricing.set_amount(PriceType.FULL_PRICE, 70000)

        assert enrollment.price_amount == 60000

    @pytest.mark.asyncio
    async def test_set_amount_publishes_update(self, pricing, event_bus):
        received = []

        async def handler(event):
            received.append(event)

        event_bus.subscribe(EventTypes.Pricing.TIER_UPDATED, handler)

        await pricing.set_amount(PriceType.EARLY_BIRD, 50000, updated_by="admin-1")

        assert len(received) == 1
        assert received[0].payload == {
            "price_type": "EARLY_BIRD",
            "amount": 50000,
            "updated_by": "admin-1",
        }
