"""Player directory and self-registration."""

from __future__ import annotations

from decimal import Decimal
import logging
from typing import Any, Dict, Optional
import uuid

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.player import Player
from services.errors import PlayerAlreadyExists, PlayerNotFound, PlayerWriteFailed

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a secret.
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=int(rounds or settings.PASSWORD_HASH_ROUNDS))
    return bcrypt.hashpw(secret, salt).decode("utf-8")


def serialize_player(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "username": player.username,
        "email": player.email,
        "credits": float(player.credits or 0),
        "is_active": bool(player.is_active),
    }


async def get_active_player(player_id: str, db: AsyncSession) -> Player:
    """Return the active player with ``player_id`` or raise ``PlayerNotFound``."""
    result = await db.execute(
        select(Player).where(Player.id == player_id, Player.is_active.is_(True))
    )
    player = result.scalar_one_or_none()
    if player is None:
        raise PlayerNotFound()
    return player


async def create_player(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
) -> Player:
    username = username.strip()
    email = email.strip()
    existing = await db.execute(
        select(Player.id).where(or_(Player.username == username, Player.email == email)).limit(1)
    )
    if existing.scalar_one_or_none():
        raise PlayerAlreadyExists()

    player = Player(
        id=str(uuid.uuid4()),
        username=username,
        email=email,
        password_hash=hash_password(password),
        credits=Decimal("0"),
        total_spent=Decimal("0"),
        is_active=True,
    )
    db.add(player)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same name.
        await db.rollback()
        raise PlayerAlreadyExists() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Player insert failed for username %s", username)
        raise PlayerWriteFailed() from exc

    logger.info("Registered player %s (%s)", player.id, username)
    return player
