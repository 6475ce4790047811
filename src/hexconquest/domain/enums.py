"""Enumerations used across the HexConquest domain."""

from __future__ import annotations

from enum import StrEnum


class ResourceType(StrEnum):
    """The three harvestable resources."""

    WOOD = "wood"
    IRON = "iron"
    STONE = "stone"


class MaintenanceOutcome(StrEnum):
    """Result of one base maintenance cycle."""

    SUSTAINED = "sustained"
    STARVED = "starved"


class StarvationPolicy(StrEnum):
    """What a starved maintenance cycle does to the base."""

    IGNORE = "ignore"
    DEGRADE_HEALTH = "degrade_health"
    DESTROY = "destroy"


class FailureReason(StrEnum):
    """Machine-readable reasons a player command can fail."""

    ALREADY_CONQUERED = "already_conquered"
    ALREADY_HAS_BASE = "already_has_base"
    NOT_CONQUERED = "not_conquered"
    NOT_OWNER = "not_owner"
    ALREADY_MAX_LEVEL = "already_max_level"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    NO_RESOURCES = "no_resources"
    NOT_FOUND = "not_found"
    NO_POSITION = "no_position"
    POSITION_UNAVAILABLE = "position_unavailable"
    STORE_FAILURE = "store_failure"
    INVALID_INPUT = "invalid_input"


class ConnectionStatus(StrEnum):
    """Connectivity flag shown to the player."""

    ONLINE = "online"
    OFFLINE = "offline"
