# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pricing domain package.

Resolves enrollment price tiers and manages administrator overrides.
"""

from src.domains.pricing.service import (
    PRICE_OPTIONS,
    InvalidPriceError,
    PriceOption,
    PricingService,
    PricingServiceError,
    default_amount,
    format_currency,
)

__all__ = [
    "PRICE_OPTIONS",
    "InvalidPriceError",
    "PriceOption",
    "PricingService",
    "PricingServiceError",
    "default_amount",
    "format_currency",
]
