"""Matter API routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jurisai.api.deps import get_entity_store, raise_http
from jurisai.api.schemas import MatterCreateRequest, MatterUpdateRequest
from jurisai.errors import JurisError
from jurisai.models import Matter
from jurisai.services.matters import MatterDetail, MatterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/matters", tags=["matters"])


def _service(store=Depends(get_entity_store)) -> MatterService:
    return MatterService(store)


@router.get("", response_model=List[Matter])
async def list_matters(
    status: Optional[str] = Query(None, description="Matter status or 'all'"),
    matter_type: Optional[str] = Query(None, description="Matter type or 'all'"),
    search: Optional[str] = Query(None, description="Match name, client or case number"),
    service: MatterService = Depends(_service),
):
    try:
        return service.list_matters(status=status, matter_type=matter_type, search=search)
    except JurisError as e:
        raise_http(e)


@router.post("", response_model=Matter, status_code=201)
async def create_matter(request: MatterCreateRequest, service: MatterService = Depends(_service)):
    try:
        return service.create_matter(**request.model_dump())
    except JurisError as e:
        raise_http(e)


@router.get("/{matter_id}", response_model=MatterDetail)
async def get_matter(matter_id: str, service: MatterService = Depends(_service)):
    """Matter with its authorities, issues, argument versions and documents"""
    try:
        return service.matter_detail(matter_id)
    except JurisError as e:
        raise_http(e)


@router.patch("/{matter_id}", response_model=Matter)
async def update_matter(
    matter_id: str, request: MatterUpdateRequest, service: MatterService = Depends(_service)
):
    try:
        return service.update_matter(matter_id, **request.model_dump(exclude_none=True))
    except JurisError as e:
        raise_http(e)
