# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pricing request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.models.common import PriceType


class PriceTierResponse(BaseModel):
    """Effective amount of one price tier."""

    price_type: PriceType
    label: str
    description: str
    amount: int = Field(description="Effective amount in Naira")
    default_amount: int
    formatted: str = Field(description="Amount formatted as Naira, e.g. ₦60,000")
    is_override: bool = Field(description="True when an administrator changed the amount")
    updated_by: str | None = None
    updated_at: datetime | None = None


class PriceTierListResponse(BaseModel):
    """All price tiers."""

    tiers: list[PriceTierResponse]


class UpdatePriceTierRequest(BaseModel):
    """Request to change the amount of a price tier."""

    price_type: PriceType
    amount: int = Field(gt=0, description="New amount in Naira")
