# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the academy PostgreSQL database.

Example:
    from src.infrastructure.database import AcademyRepository, get_session

    async with get_session() as session:
        repository = AcademyRepository(session)
        program = await repository.get_program(program_id)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.repository import AcademyRepository

__all__ = [
    "AcademyRepository",
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
