# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models and shared enums.

- common: Enumerations shared by the ORM, the engine and the API
- enrollment: Enrollment request/response DTOs
- pricing: Pricing DTOs
- waitlist: Waitlist entry, proposal and promotion DTOs
"""
