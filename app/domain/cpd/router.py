"""CPD router - FastAPI endpoints for CPD entries"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Profile
from .schemas import CPDCreate, CPDResponse, CPDSummary, CPDUpdate
from .service import CPDService

router = APIRouter(prefix="/cpd", tags=["CPD"])


def get_cpd_service(db: Session = Depends(get_db)) -> CPDService:
    return CPDService(db)


@router.get("/export")
async def export_cpd(
    format: str = Query("csv"),
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.export_entries(current_user, format.lower())


@router.get("/summary", response_model=CPDSummary)
async def get_cpd_summary(
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.get_summary(current_user)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[CPDResponse])
async def get_cpd_entries(
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.get_entries(current_user)


@router.get("/{entry_id}", response_model=CPDResponse)
async def get_cpd_entry(
    entry_id: int,
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.get_entry(entry_id, current_user)


@router.post("", response_model=CPDResponse, status_code=201)
async def create_cpd_entry(
    data: CPDCreate,
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.create_entry(data, current_user)


@router.put("/{entry_id}", response_model=CPDResponse)
async def update_cpd_entry(
    entry_id: int,
    data: CPDUpdate,
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    return service.update_entry(entry_id, data, current_user)


@router.delete("/{entry_id}")
async def delete_cpd_entry(
    entry_id: int,
    current_user: Profile = Depends(get_current_user),
    service: CPDService = Depends(get_cpd_service),
):
    service.delete_entry(entry_id, current_user)
    return {"message": "CPD entry deleted successfully"}
