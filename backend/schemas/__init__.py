from schemas.game import (
    AssetSymbol,
    PositionType,
    Asset,
    Coordinates,
    Position,
    PlantedTree,
    Quest,
    PricePoint,
    GameState
)
from schemas.trade import (
    OpenPositionRequest,
    ActionResult,
    TutorialStep
)

__all__ = [
    # Game state
    "AssetSymbol", "PositionType", "Asset", "Coordinates", "Position",
    "PlantedTree", "Quest", "PricePoint", "GameState",
    # Actions
    "OpenPositionRequest", "ActionResult", "TutorialStep"
]
