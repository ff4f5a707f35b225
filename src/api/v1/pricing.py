# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pricing API endpoints.

- GET / - Effective amount of every price tier
- PUT / - Override the amount of a tier (SUPERADMIN)
"""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import RequirePermission, get_pricing_service
from src.api.errors import to_http_error
from src.domains.auth.permissions import CurrentUser, Permission
from src.domains.pricing import PricingService, PricingServiceError
from src.models.pricing import PriceTierListResponse, PriceTierResponse, UpdatePriceTierRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=PriceTierListResponse,
    summary="List price tiers",
)
async def list_prices(
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_VIEW)),
    service: PricingService = Depends(get_pricing_service),
) -> PriceTierListResponse:
    return PriceTierListResponse(tiers=await service.list_prices())


@router.put(
    "",
    response_model=PriceTierResponse,
    summary="Update price tier",
)
async def update_price(
    data: UpdatePriceTierRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.PRICING_MANAGE)),
    service: PricingService = Depends(get_pricing_service),
) -> PriceTierResponse:
    """Override the amount of a price tier.

    Enrollments keep the price captured when they were confirmed.
    """
    try:
        return await service.set_amount(data.price_type, data.amount, updated_by=current_user.id)
    except PricingServiceError as e:
        raise to_http_error(e) from e
