"""
Store page controller helpers: launch-context resolution, return-to-game
URLs and the initial page state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from services.errors import PlayerNotFound
from services.packages import list_active_packages, serialize_package
from services.players import get_active_player, serialize_player

PLAYER_ID_PARAMS = ("playerId", "player", "userId")
RETURN_URL_PARAMS = ("gameUrl", "returnUrl")
BLANK_URL = "about:blank"


class StatusTone(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class StoreState(str, Enum):
    AUTHENTICATION_REQUIRED = "authentication_required"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class LaunchContext:
    player_id: Optional[str]
    game_url: str

    @property
    def has_game_url(self) -> bool:
        return bool(self.game_url) and self.game_url != BLANK_URL


def _first_param(params: Mapping[str, Any], names) -> Optional[str]:
    for name in names:
        value = params.get(name)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return None


def resolve_launch_context(params: Mapping[str, Any], referrer: Optional[str] = None) -> LaunchContext:
    """Pick the player id and return URL the game launched the store with."""
    player_id = _first_param(params, PLAYER_ID_PARAMS)
    game_url = _first_param(params, RETURN_URL_PARAMS) or (referrer or "").strip() or BLANK_URL
    return LaunchContext(player_id=player_id, game_url=game_url)


def build_return_url(game_url: Optional[str], player_id: Optional[str]) -> Optional[str]:
    """Game URL with ``creditsUpdated`` and ``playerId`` set, or None when unknown.

    URLs that cannot be parsed as absolute are returned untouched.
    """
    if not game_url or game_url == BLANK_URL:
        return None
    parts = urlsplit(game_url)
    if not parts.scheme or not parts.netloc:
        return game_url
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in ("creditsUpdated", "playerId")
    ]
    query.append(("creditsUpdated", "true"))
    query.append(("playerId", player_id or ""))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def status(tone: StatusTone, message: str) -> Dict[str, str]:
    return {"tone": tone.value, "message": message}


async def build_store_state(context: LaunchContext, db: AsyncSession) -> Dict[str, Any]:
    """Initial page state: catalog, player (if identified) and status message."""
    packages = [serialize_package(package) for package in await list_active_packages(db)]
    player: Optional[Dict[str, Any]] = None
    message: Optional[Dict[str, str]] = None

    if context.player_id:
        try:
            player = serialize_player(await get_active_player(context.player_id, db))
            message = status(StatusTone.SUCCESS, f"Welcome back, {player['username']}!")
        except PlayerNotFound:
            message = status(StatusTone.ERROR, "Player not found. Please check your player ID.")

    return {
        "state": (StoreState.AUTHENTICATED if player else StoreState.AUTHENTICATION_REQUIRED).value,
        "player": player,
        "packages": packages,
        "status": message,
        "gameUrl": context.game_url if context.has_game_url else None,
        "returnUrl": build_return_url(context.game_url, player["id"] if player else context.player_id),
        "redirectDelaySeconds": max(int(settings.RETURN_REDIRECT_DELAY_SECONDS), 0),
    }
