from typing import Optional

from pydantic import BaseModel, Field

from schemas.game import AssetSymbol, GameState, PositionType


class OpenPositionRequest(BaseModel):
    """Request to open a leveraged position."""
    symbol: AssetSymbol
    type: PositionType
    amount: float = Field(..., gt=0, description="Collateral to post, taken from balance")
    leverage: int = Field(1, ge=1, le=5)


class ActionResult(BaseModel):
    """Outcome of a user action. Rejected actions leave the state untouched."""
    accepted: bool
    reason: Optional[str] = None
    position_id: Optional[str] = None
    state: GameState


class TutorialStep(BaseModel):
    title: str
    content: str
