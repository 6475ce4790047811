"""Service layer for the HexConquest engine.

Services own persistence and serialization of state while the rules stay
in :mod:`hexconquest.domain`:

- Services depend on Protocol interfaces (IStore, IPositionSource)
- Use factory.py for production dependency wiring
- Inject protocol-based fakes for testing (avoid complex mocking)

Architecture:
    - TerritoryLedger: Cell lookups, conquest under per-cell locks, stats
    - ResourceZoneManager: Zone placement, collection, regeneration
    - BaseManager: Base establishment, upgrades, maintenance persistence
    - HomeTracker: Home coordinate and away-from-home checks
    - PlayerService: Player records and bounded position history
    - GameSession: Command surface and snapshots for the presentation layer
    - SimulationClock: Recurring economy tick
    - PositionTracker: Position source subscription

Production Usage:
    from hexconquest.factory import create_game_session
    session = create_game_session(store, settings=settings)
    result = await session.conquer_current_cell()
"""

from hexconquest.services.base_service import BaseManager
from hexconquest.services.game_service import GameSession, SessionLimits, SessionSnapshot
from hexconquest.services.home_service import HomeTracker
from hexconquest.services.player_service import PlayerService
from hexconquest.services.position_service import PositionTracker
from hexconquest.services.results import CommandResult
from hexconquest.services.territory_service import TerritoryLedger
from hexconquest.services.tick_service import SimulationClock
from hexconquest.services.zone_service import RegenerationReport, ResourceZoneManager

__all__ = [
    "BaseManager",
    "CommandResult",
    "GameSession",
    "HomeTracker",
    "PlayerService",
    "PositionTracker",
    "RegenerationReport",
    "ResourceZoneManager",
    "SessionLimits",
    "SessionSnapshot",
    "SimulationClock",
    "TerritoryLedger",
]
