"""Session router - FastAPI endpoints for coaching sessions"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Profile
from .schemas import SessionCreate, SessionResponse, SessionUpdate
from .service import SessionService

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    """Dependency injection for SessionService"""
    return SessionService(db)


# ============================================================================
# EXPORTS (declared before /{session_id})
# ============================================================================


@router.get("/export")
async def export_sessions(
    format: str = Query("csv"),
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.export_sessions(current_user, format.lower())


@router.get("/export/icf-log")
async def export_icf_log(
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.export_icf_log(current_user)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[SessionResponse])
async def get_sessions(
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.get_sessions(current_user)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: int,
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.get_session(session_id, current_user)


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    data: SessionCreate,
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.create_session(data, current_user)


@router.put("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: int,
    data: SessionUpdate,
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.update_session(session_id, data, current_user)


@router.delete("/{session_id}")
async def delete_session(
    session_id: int,
    current_user: Profile = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    service.delete_session(session_id, current_user)
    return {"message": "Session deleted successfully"}
