"""Mentoring router - FastAPI endpoints for mentoring and supervision sessions"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Profile
from .schemas import MentoringCreate, MentoringResponse, MentoringUpdate
from .service import MentoringService

router = APIRouter(prefix="/mentoring", tags=["Mentoring"])


def get_mentoring_service(db: Session = Depends(get_db)) -> MentoringService:
    return MentoringService(db)


@router.get("", response_model=list[MentoringResponse])
async def get_mentoring_sessions(
    current_user: Profile = Depends(get_current_user),
    service: MentoringService = Depends(get_mentoring_service),
):
    return service.get_sessions(current_user)


@router.get("/{session_id}", response_model=MentoringResponse)
async def get_mentoring_session(
    session_id: int,
    current_user: Profile = Depends(get_current_user),
    service: MentoringService = Depends(get_mentoring_service),
):
    return service.get_session(session_id, current_user)


@router.post("", response_model=MentoringResponse, status_code=201)
async def create_mentoring_session(
    data: MentoringCreate,
    current_user: Profile = Depends(get_current_user),
    service: MentoringService = Depends(get_mentoring_service),
):
    return service.create_session(data, current_user)


@router.put("/{session_id}", response_model=MentoringResponse)
async def update_mentoring_session(
    session_id: int,
    data: MentoringUpdate,
    current_user: Profile = Depends(get_current_user),
    service: MentoringService = Depends(get_mentoring_service),
):
    return service.update_session(session_id, data, current_user)


@router.delete("/{session_id}")
async def delete_mentoring_session(
    session_id: int,
    current_user: Profile = Depends(get_current_user),
    service: MentoringService = Depends(get_mentoring_service),
):
    service.delete_session(session_id, current_user)
    return {"message": "Mentoring session deleted successfully"}
