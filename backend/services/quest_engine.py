"""
Quest board state machine.

Each rule returns a QuestUpdate: the new quest tuple plus the ids that
became completed in that step. Crediting ECO tokens from `newly_completed`
(rather than re-scanning the board) is what keeps every reward one-shot.
Progress only moves forward and a completed quest is never reopened.
"""
from __future__ import annotations

from typing import Callable, Iterable, NamedTuple

from schemas.game import Position, PositionType, Quest
from services.catalog import DIVERSIFY, FIRST_GROWTH, RISK_MANAGER, SUSTAINABLE_TRADER

HIGH_LEVERAGE = 5
SUSTAINABLE_PROFIT_PCT = 5.0
DIVERSIFY_MIN_POSITIONS = 2


class QuestUpdate(NamedTuple):
    quests: tuple[Quest, ...]
    newly_completed: tuple[Quest, ...]

    @property
    def reward(self) -> int:
        return sum(q.reward for q in self.newly_completed)

    @property
    def completed_ids(self) -> list[str]:
        return [q.id for q in self.newly_completed]


def _advance(quest: Quest, progress: int) -> Quest:
    """Move a quest forward to `progress`, completing it at max_progress."""
    progress = min(max(progress, quest.progress), quest.max_progress)
    return quest.model_copy(update={
        "progress": progress,
        "completed": quest.completed or progress >= quest.max_progress,
    })


def _apply(quests: Iterable[Quest], rule: Callable[[Quest], Quest]) -> QuestUpdate:
    updated = []
    newly_completed = []
    for quest in quests:
        if quest.completed:
            updated.append(quest)
            continue
        new_quest = rule(quest)
        if new_quest.completed:
            newly_completed.append(new_quest)
        updated.append(new_quest)
    return QuestUpdate(quests=tuple(updated), newly_completed=tuple(newly_completed))


def on_position_opened(quests: Iterable[Quest], direction: PositionType, open_count: int) -> QuestUpdate:
    """Open-action rules. `open_count` includes the position just opened."""
    def rule(quest: Quest) -> Quest:
        if quest.id == FIRST_GROWTH and direction == PositionType.LONG:
            return _advance(quest, quest.max_progress)
        if quest.id == DIVERSIFY and open_count >= DIVERSIFY_MIN_POSITIONS:
            return _advance(quest, quest.max_progress)
        return quest

    return _apply(quests, rule)


def on_position_closed(quests: Iterable[Quest], pnl_percent: float) -> QuestUpdate:
    def rule(quest: Quest) -> Quest:
        if quest.id == SUSTAINABLE_TRADER and pnl_percent >= SUSTAINABLE_PROFIT_PCT:
            return _advance(quest, quest.max_progress)
        return quest

    return _apply(quests, rule)


def on_tick(quests: Iterable[Quest], positions: Iterable[Position]) -> QuestUpdate:
    """Passive rules evaluated once per tick against the surviving positions.

    Storm Weatherer counts ticks during which *any* 5x position is open; it
    is not tied to one position surviving continuously.
    """
    holding_high_leverage = any(p.leverage >= HIGH_LEVERAGE for p in positions)

    def rule(quest: Quest) -> Quest:
        if quest.id == RISK_MANAGER and holding_high_leverage:
            return _advance(quest, quest.progress + 1)
        return quest

    return _apply(quests, rule)
