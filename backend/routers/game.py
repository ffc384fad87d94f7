import asyncio
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import get_settings
from schemas.game import Asset, GameState
from schemas.trade import ActionResult, OpenPositionRequest, TutorialStep
from services.catalog import TUTORIAL_STEPS
from services.game_session import GameSession, get_game_session

router = APIRouter(prefix="/api/game", tags=["game"])
settings = get_settings()

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("/state", response_model=GameState)
async def get_state(session: GameSession = Depends(get_game_session)):
    """Current simulation snapshot."""
    return session.state


@router.post("/positions", response_model=ActionResult)
@limiter.limit(settings.open_position_rate_limit)
async def open_position(
    request: Request,
    data: OpenPositionRequest,
    session: GameSession = Depends(get_game_session),
):
    """Open a LONG or SHORT position. Requests the balance can't cover are ignored."""
    outcome = session.open_position(data.symbol, data.type, data.amount, data.leverage)
    return ActionResult(
        accepted=outcome.accepted,
        reason=outcome.reason,
        position_id=outcome.position_id,
        state=outcome.state,
    )


@router.delete("/positions/{position_id}", response_model=ActionResult)
async def close_position(position_id: str, session: GameSession = Depends(get_game_session)):
    """Close a position, releasing collateral + PnL. Unknown ids leave the game untouched."""
    outcome = session.close_position(position_id)
    return ActionResult(
        accepted=outcome.accepted,
        reason=outcome.reason,
        position_id=outcome.position_id,
        state=outcome.state,
    )


@router.post("/reset", response_model=GameState)
async def reset_game(session: GameSession = Depends(get_game_session)):
    """Start over with the starting balance and a fresh quest board."""
    return session.reset()


@router.get("/assets", response_model=list[Asset])
async def list_assets(session: GameSession = Depends(get_game_session)):
    """Asset catalog with live prices."""
    state = session.state
    return [
        asset.model_copy(update={"price": state.prices.get(symbol, asset.price)})
        for symbol, asset in session.engine.assets.items()
    ]


@router.get("/tutorial", response_model=list[TutorialStep])
async def get_tutorial():
    return TUTORIAL_STEPS


def sse_frame(state: GameState) -> str:
    return f"data: {json.dumps(state.model_dump(mode='json'))}\n\n"


@router.get("/stream")
async def stream_game(session: GameSession = Depends(get_game_session)):
    """SSE endpoint pushing every new snapshot (ticks and actions)."""
    poll_seconds = settings.stream_poll_seconds

    async def event_generator():
        last_version = -1
        while True:
            state = session.state
            if state.version != last_version:
                last_version = state.version
                yield sse_frame(state)
            await asyncio.sleep(poll_seconds)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
