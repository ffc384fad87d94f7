from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AssetSymbol(str, Enum):
    ETH = "ETH"
    BTC = "BTC"
    SOL = "SOL"


class PositionType(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class Asset(BaseModel):
    """Static asset configuration. Only the price moves, and it lives in GameState."""
    model_config = ConfigDict(frozen=True)

    symbol: AssetSymbol
    name: str
    price: float = Field(..., gt=0)
    volatility: float = Field(..., ge=0)  # relative stddev per tick
    trend: float  # small signed bias per tick


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    z: float


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    symbol: AssetSymbol
    type: PositionType
    entry_price: float = Field(..., gt=0)
    size: float  # notional, collateral * leverage
    leverage: int = Field(..., ge=1, le=5)
    collateral: float = Field(..., gt=0)
    pnl: float = 0.0
    pnl_percent: float = 0.0
    timestamp: int  # epoch ms
    coordinates: Coordinates


class PlantedTree(BaseModel):
    """A tree left behind by a profitable LONG. Never removed."""
    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    z: float
    scale: float
    date: int  # epoch ms


class Quest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    reward: int = Field(..., gt=0)  # ECO tokens
    completed: bool = False
    progress: int = 0
    max_progress: int = Field(..., gt=0)


class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: int  # epoch ms
    price: float


class GameState(BaseModel):
    """Root snapshot. Replaced wholesale by every transition, never edited in place."""
    model_config = ConfigDict(frozen=True)

    balance: float
    eco_tokens: int = 0
    sustainability_score: int = Field(100, ge=0, le=100)
    positions: tuple[Position, ...] = ()
    planted_trees: tuple[PlantedTree, ...] = ()
    prices: dict[AssetSymbol, float]
    quests: tuple[Quest, ...] = ()
    market_history: dict[AssetSymbol, tuple[PricePoint, ...]]
    tick: int = 0
    version: int = 0
    recent_liquidations: tuple[str, ...] = ()  # ids force-closed by the latest tick
