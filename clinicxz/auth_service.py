# clinicxz/auth_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select

from clinicxz.models import User
from clinicxz.relational import Repository

logger = logging.getLogger(__name__)


class AuthRepository(Repository):

    async def verify(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Return {id, username} when the pair matches, else None.

        Passwords are compared as stored (plaintext). No hashing, no rate
        limiting, no lockout.
        """
        stmt = select(User).where(User.username == username, User.hashed_password == password)
        async with self.db.transaction() as session:
            user = await session.scalar(stmt)
        if user is None:
            logger.info("Login failed for %r", username)
            return None
        return {"id": user.id, "username": user.username}
