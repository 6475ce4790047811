"""Player state transitions: creation, health and score."""

from __future__ import annotations

from dataclasses import replace

from .economy import clamp
from .models import PlayerID, PlayerState
from .rules_config import DEFAULT_RULES, PlayerRules


def new_player(player_id: PlayerID, rules: PlayerRules = DEFAULT_RULES.player) -> PlayerState:
    """A fresh player with starting health, score and resources."""

    return PlayerState(
        id=player_id,
        resources=rules.starting_resources,
        health=rules.starting_health,
        score=0,
        level=1,
    )


def update_health(
    player: PlayerState, delta: int, rules: PlayerRules = DEFAULT_RULES.player
) -> PlayerState:
    # Health stays within [0, max_health]
    return replace(player, health=clamp(player.health + delta, 0, rules.max_health))


def update_score(player: PlayerState, delta: int) -> PlayerState:
    return replace(player, score=max(0, player.score + delta))
