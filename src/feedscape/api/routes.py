"""API routes for feedscape.

Provides:
- /scene snapshot for renderers
- Filter and source configuration (each change re-reconciles or re-polls)
- Pointer, viewport and orbit-control events
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from feedscape.context import ReconciliationContext
from feedscape.models import SourceDescriptor, TimeWindow

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Models
# ============================================================================


class HealthResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    scheduler_running: bool = False
    render_loop_running: bool = False


class FilterUpdate(BaseModel):
    """Partial filter update; omitted fields keep their value."""

    time_window: TimeWindow | None = None
    category_visibility: dict[str, bool] | None = None
    search_term: str | None = None


class FilterResponse(BaseModel):
    time_window: TimeWindow
    category_visibility: dict[str, bool]
    search_term: str


class SourceModel(BaseModel):
    address: str = Field(min_length=1)
    category: str = Field(min_length=1)


class PointerEvent(BaseModel):
    x: float
    y: float


class PointerResponse(BaseModel):
    entity: dict | None = None
    hover: dict


class ViewportUpdate(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class ControlsUpdate(BaseModel):
    auto_rotate: bool | None = None
    interacting: bool | None = None


class ReconcileResponse(BaseModel):
    created: list[str] = []
    repositioned: list[str] = []
    destroyed: list[str] = []
    spawned: list[str] = []
    edges: int = 0
    errors: list[str] = []


def get_context(request: Request) -> ReconciliationContext:
    """Get reconciliation context from app state."""
    return request.app.state.context


def _filters(ctx: ReconciliationContext) -> FilterResponse:
    return FilterResponse(**ctx.filter_state.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    ctx = get_context(request)
    return HealthResponse(
        status="healthy",
        scheduler_running=ctx.scheduler.running,
        render_loop_running=ctx.render_loop.running,
    )


@router.get("/scene")
async def get_scene(request: Request) -> dict:
    """Current scene: objects, relation lines, effects, camera and hover state."""
    return get_context(request).snapshot()


@router.get("/entities")
async def get_entities(request: Request, visible_only: bool = False) -> dict:
    ctx = get_context(request)
    entities = ctx.visible if visible_only else ctx.store.current
    return {
        "total": len(ctx.store),
        "visible": len(ctx.visible),
        "entities": [e.to_dict() for e in entities],
    }


@router.get("/filters", response_model=FilterResponse)
async def get_filters(request: Request) -> FilterResponse:
    return _filters(get_context(request))


@router.put("/filters", response_model=FilterResponse)
async def update_filters(update: FilterUpdate, request: Request) -> FilterResponse:
    ctx = get_context(request)
    ctx.update_filters(
        time_window=update.time_window,
        category_visibility=update.category_visibility,
        search_term=update.search_term,
    )
    return _filters(ctx)


@router.get("/sources", response_model=list[SourceModel])
async def list_sources(request: Request) -> list[SourceModel]:
    return [SourceModel(**s.to_dict()) for s in get_context(request).sources]


@router.post("/sources", response_model=list[SourceModel], status_code=201)
async def add_source(source: SourceModel, request: Request) -> list[SourceModel]:
    ctx = get_context(request)
    ctx.add_source(SourceDescriptor(address=source.address, category=source.category))
    return [SourceModel(**s.to_dict()) for s in ctx.sources]


@router.delete("/sources/{index}", response_model=list[SourceModel])
async def remove_source(index: int, request: Request) -> list[SourceModel]:
    ctx = get_context(request)
    try:
        ctx.remove_source(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [SourceModel(**s.to_dict()) for s in ctx.sources]


@router.post("/refresh", response_model=ReconcileResponse)
async def refresh(request: Request) -> ReconcileResponse:
    """Poll all sources now and return what the reconcile pass did."""
    ctx = get_context(request)
    batch = await ctx.scheduler.poll_once()
    if batch is None or ctx.last_result is None:
        raise HTTPException(status_code=409, detail="Scheduler is stopped")
    return ReconcileResponse(**ctx.last_result.to_dict())


@router.post("/pointer", response_model=PointerResponse)
async def pointer_move(event: PointerEvent, request: Request) -> PointerResponse:
    ctx = get_context(request)
    entity = ctx.pointer_move(event.x, event.y)
    return PointerResponse(
        entity=entity.to_dict() if entity else None,
        hover=ctx.hover.to_dict(),
    )


@router.post("/viewport")
async def resize_viewport(update: ViewportUpdate, request: Request) -> dict:
    ctx = get_context(request)
    ctx.resize(update.width, update.height)
    return ctx.camera.to_dict()


@router.put("/controls")
async def update_controls(update: ControlsUpdate, request: Request) -> dict:
    """Auto-rotate toggle and orbit-control grab/release."""
    loop = get_context(request).render_loop
    if update.auto_rotate is not None:
        loop.auto_rotate = update.auto_rotate
    if update.interacting is True:
        loop.begin_interaction()
    elif update.interacting is False:
        loop.end_interaction()
    return {"auto_rotate": loop.auto_rotate, "rotating": loop.rotating}
