"""Health, dashboard and analytics routes"""

from fastapi import APIRouter, Depends

from jurisai.api.deps import get_entity_store, get_workspaces, raise_http
from jurisai.api.schemas import HealthResponse
from jurisai.errors import JurisError
from jurisai.services.analytics import AnalyticsReport, build_report
from jurisai.services.matters import DashboardSummary, MatterService

router = APIRouter(prefix="/api", tags=["insights"])


@router.get("/health", response_model=HealthResponse)
async def health(store=Depends(get_entity_store), workspaces=Depends(get_workspaces)):
    return HealthResponse(store=store.get_status(), active_workspaces=workspaces.active_count)


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(store=Depends(get_entity_store)):
    try:
        return MatterService(store).dashboard()
    except JurisError as e:
        raise_http(e)


@router.get("/analytics", response_model=AnalyticsReport)
async def analytics(store=Depends(get_entity_store)):
    try:
        return build_report(store)
    except JurisError as e:
        raise_http(e)
