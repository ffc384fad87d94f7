"""
Static game content: tradable assets, the quest board and tutorial text.
"""
from schemas.game import Asset, AssetSymbol, Quest

ASSETS: dict[AssetSymbol, Asset] = {
    AssetSymbol.ETH: Asset(symbol=AssetSymbol.ETH, name="Ethereum", price=3000.0, volatility=0.02, trend=0.1),
    AssetSymbol.BTC: Asset(symbol=AssetSymbol.BTC, name="Bitcoin", price=60000.0, volatility=0.015, trend=0.05),
    AssetSymbol.SOL: Asset(symbol=AssetSymbol.SOL, name="Solana", price=150.0, volatility=0.04, trend=-0.05),
}

FIRST_GROWTH = "first_growth"
DIVERSIFY = "diversify"
SUSTAINABLE_TRADER = "sustainable_trader"
RISK_MANAGER = "risk_manager"

INITIAL_QUESTS: tuple[Quest, ...] = (
    Quest(
        id=FIRST_GROWTH,
        title="Plant a Seed",
        description="Open your first LONG position to plant a tree in your biome.",
        reward=50,
        max_progress=1,
    ),
    Quest(
        id=DIVERSIFY,
        title="Ecosystem Diversity",
        description="Have at least 2 active positions (Long or Short) simultaneously.",
        reward=100,
        max_progress=2,
    ),
    Quest(
        id=SUSTAINABLE_TRADER,
        title="Sustainable Growth",
        description="Close a position with at least +5% profit.",
        reward=200,
        max_progress=1,
    ),
    Quest(
        id=RISK_MANAGER,
        title="Storm Weatherer",
        description="Keep a high leverage (5x) position open for 30 seconds without liquidation.",
        reward=300,
        max_progress=30,
    ),
)

TUTORIAL_STEPS: list[dict[str, str]] = [
    {
        "title": "Welcome to Eco-Sim Perps",
        "content": (
            "This is a trading simulation where your portfolio is a living biome. "
            "Your goal is to grow your ecosystem while managing financial risk."
        ),
    },
    {
        "title": "Longs are Life",
        "content": (
            "Opening a LONG position (betting price goes up) plants trees. "
            "Profitable trades make them bloom. Losses make them wither."
        ),
    },
    {
        "title": "Shorts are Structure",
        "content": (
            "Opening a SHORT position (betting price goes down) raises mountains. "
            "Profits make them sturdy. Losses cause erosion."
        ),
    },
    {
        "title": "Sustainability is Key",
        "content": (
            "High leverage decreases your Sustainability Score, risking 'climate disasters' "
            "(liquidations). Trade wisely!"
        ),
    },
]
