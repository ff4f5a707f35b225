"""Coding Academy Enrollment Backend.

Program enrollment, capacity-bounded class assignment, waitlisting,
course history and tiered pricing for a coding academy.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
