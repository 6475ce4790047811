"""HTTP routes for the HexConquest API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hexconquest.api.runtime import ApiState
from hexconquest.domain.enums import FailureReason
from hexconquest.domain.errors import (
    PermissionDenied,
    PositionTimeout,
    PositionUnavailable,
)
from hexconquest.domain.models import CellID, Coordinate, PositionFix
from hexconquest.models.base import as_utc, utc_now
from hexconquest.services.results import CommandResult

router = APIRouter()

T = TypeVar("T")

FAILURE_STATUS: dict[FailureReason, int] = {
    FailureReason.ALREADY_CONQUERED: status.HTTP_409_CONFLICT,
    FailureReason.ALREADY_HAS_BASE: status.HTTP_409_CONFLICT,
    FailureReason.NOT_CONQUERED: status.HTTP_409_CONFLICT,
    FailureReason.NOT_OWNER: status.HTTP_409_CONFLICT,
    FailureReason.ALREADY_MAX_LEVEL: status.HTTP_409_CONFLICT,
    FailureReason.NO_RESOURCES: status.HTTP_409_CONFLICT,
    FailureReason.NO_POSITION: status.HTTP_409_CONFLICT,
    FailureReason.INSUFFICIENT_RESOURCES: status.HTTP_402_PAYMENT_REQUIRED,
    FailureReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.INVALID_INPUT: 422,
    FailureReason.STORE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    FailureReason.POSITION_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


def http_error(reason: FailureReason, message: str | None) -> HTTPException:
    return HTTPException(
        status_code=FAILURE_STATUS.get(reason, status.HTTP_400_BAD_REQUEST),
        detail={"reason": str(reason), "message": message or str(reason)},
    )


def unwrap(result: CommandResult[T]) -> T:
    """Return the command value or raise the HTTP error matching its reason."""

    if result.ok:
        return result.value  # type: ignore[return-value]
    raise http_error(result.reason or FailureReason.INVALID_INPUT, result.message)


# ---------------------------------------------------------------------------
# Schemas


class ApiModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CoordinateModel(ApiModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class ResourcesModel(ApiModel):
    wood: int
    iron: int
    stone: int


class CostModel(ApiModel):
    wood: int | None = None
    iron: int | None = None
    stone: int | None = None


class PositionModel(ApiModel):
    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: float | None = None


class PlayerResponse(ApiModel):
    id: str
    resources: ResourcesModel
    health: int
    score: int
    level: int
    base_cell: str | None
    last_known_position: PositionModel | None


class TerritoryResponse(ApiModel):
    cell: str
    conquered: bool
    conquered_by: str | None
    conquered_at: datetime | None
    center: CoordinateModel | None
    conquest_cost: CostModel
    maintenance_cost: CostModel
    is_default: bool = False


class StatsResponse(ApiModel):
    total: int
    conquered: int
    unconquered: int


class ZoneResponse(ApiModel):
    cell: str
    resource_type: str
    amount: int
    regeneration_rate: int
    last_regeneration: datetime


class BaseResponse(ApiModel):
    cell: str
    player_id: str
    level: int
    health: int
    max_health: int
    last_maintenance: datetime
    resource_generation: ResourcesModel
    maintenance_cost: ResourcesModel


class HomeResponse(ApiModel):
    player_id: str
    position: CoordinateModel
    saved_at: datetime


class SnapshotResponse(ApiModel):
    player: PlayerResponse | None
    position: PositionModel | None
    current_cell: str | None
    territory: TerritoryResponse | None
    stats: StatsResponse | None
    home: HomeResponse | None
    away_from_home: bool
    connection: str
    base: BaseResponse | None
    zones: list[ZoneResponse]
    position_error: str | None = None


class PositionRequest(CoordinateModel):
    accuracy: float | None = Field(default=None, ge=0.0)
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


class PositionErrorRequest(BaseModel):
    code: Literal["permission_denied", "timeout", "unavailable"]
    message: str = "Location unavailable"


class PositionResponse(BaseModel):
    cell: str | None
    connection: str
    away_from_home: bool


class PositionHistoryResponse(BaseModel):
    latest: PositionModel | None
    fixes: list[PositionModel]


class CellRequest(BaseModel):
    cell: str | None = None


class HomeRequest(BaseModel):
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)


class CollectResponse(BaseModel):
    cell: str
    collected: int
    resources: ResourcesModel


class TickAdvanceRequest(BaseModel):
    count: int = Field(default=1, ge=1, le=30)


class TickAdvanceResponse(BaseModel):
    ticks: int
    regenerated_zones: int
    maintenance: str | None
    resources: ResourcesModel | None


class TickScheduleRequest(BaseModel):
    enabled: bool
    interval_seconds: float | None = Field(default=None, gt=0.0)
    debug_multiplier: float | None = Field(default=None, gt=0.0)


class TickStatusResponse(BaseModel):
    enabled: bool
    interval_seconds: float
    debug_multiplier: float
    effective_interval_seconds: float
    tick_count: int
    last_tick_at: datetime | None


def _polygon(ring: list[Coordinate]) -> dict[str, object]:
    # GeoJSON orders positions as [longitude, latitude]
    return {
        "type": "Polygon",
        "coordinates": [[[point.longitude, point.latitude] for point in ring]],
    }


def _tick_status(state: ApiState) -> TickStatusResponse:
    return TickStatusResponse(
        enabled=state.ticks.running,
        interval_seconds=state.ticks.base_interval_seconds,
        debug_multiplier=state.ticks.debug_multiplier,
        effective_interval_seconds=state.ticks.interval_seconds,
        tick_count=state.ticks.tick_count,
        last_tick_at=state.ticks.last_tick_at,
    )


# ---------------------------------------------------------------------------
# Status


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    store_ok = await state.store.healthy()
    return {
        "status": "ok" if store_ok else "degraded",
        "store": store_ok,
        "watching_position": state.tracker.watching,
        "tick_running": state.ticks.running,
        "tick_interval_seconds": state.ticks.interval_seconds,
        "debug_tick_multiplier": state.ticks.debug_multiplier,
    }


@router.get("/snapshot", response_model=SnapshotResponse)
async def snapshot(state: ApiStateDep) -> SnapshotResponse:
    snap = await state.session.snapshot()
    territory = None
    if snap.territory is not None:
        territory = TerritoryResponse.model_validate(snap.territory)
        territory.is_default = snap.territory_is_default
    error = state.session.last_position_error
    return SnapshotResponse(
        player=PlayerResponse.model_validate(snap.player) if snap.player else None,
        position=PositionModel.model_validate(snap.position) if snap.position else None,
        current_cell=snap.current_cell,
        territory=territory,
        stats=StatsResponse.model_validate(snap.stats) if snap.stats else None,
        home=HomeResponse.model_validate(snap.home) if snap.home else None,
        away_from_home=snap.away_from_home,
        connection=str(snap.connection),
        base=BaseResponse.model_validate(snap.base) if snap.base else None,
        zones=[ZoneResponse.model_validate(zone) for zone in snap.zones],
        position_error=str(error) if error is not None else None,
    )


# ---------------------------------------------------------------------------
# Position


def _position_response(state: ApiState) -> PositionResponse:
    session = state.session
    return PositionResponse(
        cell=session.current_cell,
        connection=str(session.connection_status()),
        away_from_home=session.away_from_home,
    )


@router.post("/position", response_model=PositionResponse)
async def report_position(request: PositionRequest, state: ApiStateDep) -> PositionResponse:
    fix = PositionFix(
        latitude=request.latitude,
        longitude=request.longitude,
        timestamp=request.timestamp or utc_now(),
        accuracy=request.accuracy,
    )
    if state.tracker.watching:
        await state.positions.publish(fix)
    else:
        unwrap(await state.session.apply_position(fix))
    return _position_response(state)


@router.post("/position/error", status_code=status.HTTP_204_NO_CONTENT)
async def report_position_error(request: PositionErrorRequest, state: ApiStateDep) -> None:
    errors: dict[str, type[PositionUnavailable]] = {
        "permission_denied": PermissionDenied,
        "timeout": PositionTimeout,
        "unavailable": PositionUnavailable,
    }
    await state.positions.fail(errors[request.code](request.message))


@router.post("/position/refresh", response_model=PositionResponse)
async def refresh_position(state: ApiStateDep) -> PositionResponse:
    unwrap(await state.session.refresh_position())
    return _position_response(state)


@router.get("/position/history", response_model=PositionHistoryResponse)
async def position_history(state: ApiStateDep) -> PositionHistoryResponse:
    """Stored fixes oldest first; empty when the history cannot be read."""
    players = state.session.players
    fixes = await players.position_history()
    latest = await players.latest_position()
    return PositionHistoryResponse(
        latest=PositionModel.model_validate(latest) if latest is not None else None,
        fixes=[PositionModel.model_validate(fix) for fix in fixes],
    )


# ---------------------------------------------------------------------------
# Territory and cells


@router.post("/territory/conquer", response_model=TerritoryResponse)
async def conquer_current_cell(state: ApiStateDep) -> TerritoryResponse:
    record = unwrap(await state.session.conquer_current_cell())
    return TerritoryResponse.model_validate(record)


@router.get("/territory/stats", response_model=StatsResponse)
async def territory_stats(state: ApiStateDep) -> StatsResponse:
    stats = await state.session.stats()
    if stats is None:
        raise http_error(FailureReason.STORE_FAILURE, "stats unavailable")
    return StatsResponse.model_validate(stats)


@router.get("/territory/{cell}", response_model=TerritoryResponse)
async def get_territory(cell: str, state: ApiStateDep) -> TerritoryResponse:
    lookup = unwrap(await state.session.territory(CellID(cell)))
    response = TerritoryResponse.model_validate(lookup.record)
    response.is_default = lookup.is_default
    return response


@router.get("/cells/visible")
async def visible_cells(state: ApiStateDep) -> dict[str, object]:
    session = state.session
    features = [
        {
            "type": "Feature",
            "id": cell,
            "geometry": _polygon(session.grid.boundary(cell)),
            "properties": {"cell": cell, "current": cell == session.current_cell},
        }
        for cell in session.visible_cells()
    ]
    return {"type": "FeatureCollection", "features": features}


@router.get("/cells/{cell}/boundary")
async def cell_boundary(cell: str, state: ApiStateDep) -> dict[str, object]:
    return _polygon(state.session.grid.boundary(CellID(cell)))


# ---------------------------------------------------------------------------
# Resource zones


@router.get("/zones", response_model=list[ZoneResponse])
async def list_zones(state: ApiStateDep) -> list[ZoneResponse]:
    zones = await state.session.zones.list_zones()
    return [ZoneResponse.model_validate(zone) for zone in zones]


@router.post("/zones/seed", response_model=list[ZoneResponse])
async def seed_zones(state: ApiStateDep) -> list[ZoneResponse]:
    zones = unwrap(await state.session.seed_resource_zones())
    return [ZoneResponse.model_validate(zone) for zone in zones]


@router.post("/zones/{cell}/collect", response_model=CollectResponse)
async def collect_zone(cell: str, state: ApiStateDep) -> CollectResponse:
    collected = unwrap(await state.session.collect_from(CellID(cell)))
    player = state.session.player
    return CollectResponse(
        cell=cell,
        collected=collected,
        resources=ResourcesModel.model_validate(player.resources),
    )


# ---------------------------------------------------------------------------
# Bases


@router.get("/base", response_model=BaseResponse)
async def get_base(state: ApiStateDep) -> BaseResponse:
    base = await state.session.bases.base_for_player(state.session.player_id)
    if base is None:
        raise http_error(FailureReason.NOT_FOUND, "player has no base")
    return BaseResponse.model_validate(base)


@router.post("/base/establish", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
async def establish_base(request: CellRequest, state: ApiStateDep) -> BaseResponse:
    cell = CellID(request.cell) if request.cell else None
    base = unwrap(await state.session.establish_base(cell))
    return BaseResponse.model_validate(base)


@router.post("/base/upgrade", response_model=BaseResponse)
async def upgrade_base(request: CellRequest, state: ApiStateDep) -> BaseResponse:
    cell = CellID(request.cell) if request.cell else None
    base = unwrap(await state.session.upgrade_base(cell))
    return BaseResponse.model_validate(base)


# ---------------------------------------------------------------------------
# Home


@router.post("/home", response_model=HomeResponse)
async def set_home(request: HomeRequest, state: ApiStateDep) -> HomeResponse:
    coordinate = None
    if request.latitude is not None and request.longitude is not None:
        coordinate = Coordinate(latitude=request.latitude, longitude=request.longitude)
    home = unwrap(await state.session.set_home(coordinate))
    return HomeResponse.model_validate(home)


@router.post("/home/return", response_model=PositionResponse)
async def return_to_home(state: ApiStateDep) -> PositionResponse:
    unwrap(await state.session.return_to_home())
    return _position_response(state)


# ---------------------------------------------------------------------------
# Simulation clock


@router.post("/tick/advance", response_model=TickAdvanceResponse)
async def advance_tick(request: TickAdvanceRequest, state: ApiStateDep) -> TickAdvanceResponse:
    results = await state.ticks.tick_now(request.count)
    last = results[-1]
    player = state.session.player
    return TickAdvanceResponse(
        ticks=len(results),
        regenerated_zones=sum(len(result.regenerated) for result in results),
        maintenance=str(last.maintenance) if last.maintenance is not None else None,
        resources=ResourcesModel.model_validate(player.resources) if player else None,
    )


@router.get("/tick/schedule", response_model=TickStatusResponse)
async def get_tick_schedule(state: ApiStateDep) -> TickStatusResponse:
    return _tick_status(state)


@router.post("/tick/schedule", response_model=TickStatusResponse)
async def update_tick_schedule(
    request: TickScheduleRequest, state: ApiStateDep
) -> TickStatusResponse:
    if request.interval_seconds is not None:
        state.ticks.set_base_interval(request.interval_seconds)
    if request.debug_multiplier is not None:
        state.ticks.set_debug_multiplier(request.debug_multiplier)

    if request.enabled:
        state.ticks.start()
    else:
        await state.ticks.stop()
    return _tick_status(state)
