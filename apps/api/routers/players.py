"""Player directory and registration router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.errors import RequestValidationFailed
from services.players import create_player, get_active_player, serialize_player

router = APIRouter()


class PlayerResponse(BaseModel):
    id: str
    username: str
    email: str
    credits: float
    is_active: bool


class CreatePlayerRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class CreatePlayerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Player created successfully"
    player_id: str = Field(serialization_alias="playerId")
    username: str


@router.get("/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: str, db: AsyncSession = Depends(get_db)):
    """Look up an active player by id; games also use this to confirm balances."""
    player = await get_active_player(player_id, db)
    return serialize_player(player)


@router.post(
    "/create-player",
    status_code=201,
    response_model=CreatePlayerResponse,
    response_model_by_alias=True,
)
async def register_player(
    request: CreatePlayerRequest,
    _rate_limit: None = Depends(rate_limit("create_player", limit=20, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    username = (request.username or "").strip()
    email = (request.email or "").strip()
    if not username or not email or not request.password:
        raise RequestValidationFailed("Username, email, and password are required")

    player = await create_player(db, username=username, email=email, password=request.password)
    return CreatePlayerResponse(player_id=player.id, username=player.username)
