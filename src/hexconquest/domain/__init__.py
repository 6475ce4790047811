"""Domain model for the HexConquest territory and resource economy.

This package hosts all game rules as pure functions over plain dataclasses:

* Dataclasses describing every engine entity (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions for the economy, zones, territory, bases, home
  tracking and the simulation tick.

Persistence and scheduling live in :mod:`hexconquest.services`; nothing in
this package performs I/O.
"""

from . import (
    bases,
    economy,
    enums,
    errors,
    home,
    models,
    players,
    rules_config,
    territory,
    tick,
    zones,
)

__all__ = [
    "bases",
    "economy",
    "enums",
    "errors",
    "home",
    "models",
    "players",
    "rules_config",
    "territory",
    "tick",
    "zones",
]
