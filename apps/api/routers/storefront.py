"""Store page and its bootstrap state."""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from services.storefront import build_store_state, resolve_launch_context

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

page_router = APIRouter()
router = APIRouter()


@page_router.get("/", response_class=HTMLResponse)
async def storefront_page(request: Request):
    """Render the store shell; the page script loads state from the API."""
    context = resolve_launch_context(request.query_params, request.headers.get("referer"))
    return templates.TemplateResponse(
        request,
        "storefront.html",
        {
            "bootstrap": {
                "apiPrefix": settings.API_PREFIX,
                "playerId": context.player_id,
                "gameUrl": context.game_url if context.has_game_url else None,
            },
            "origin": str(request.base_url).rstrip("/"),
        },
    )


@router.get("/storefront/state")
async def storefront_state(request: Request, db: AsyncSession = Depends(get_db)):
    # The page already resolved the referrer; here it would point at the store itself.
    context = resolve_launch_context(request.query_params)
    return await build_store_state(context, db)
